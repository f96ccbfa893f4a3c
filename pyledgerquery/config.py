"""Configuration loading."""

import copy
import logging
import logging.config
import os
from os.path import expanduser

import yaml

HOME = expanduser("~")
DEFAULT_PATH = os.path.join(HOME, '.config', 'pyledgerquery', 'config.yaml')

DEFAULT_CONFIG = yaml.safe_load("""
logging:
  version: 1
  disable_existing_loggers: False
  formatters:
    simple:
      format: '%(asctime)s %(name)s %(levelname)s %(message)s'
  handlers:
    console:
      class: logging.StreamHandler
      formatter: simple
      stream: ext://sys.stderr
  loggers:
    pyledgerquery:
      level: WARNING
      handlers: [console]
      propagate: False

networth:
  commodity: USD
  assets:
    - Assets
  liabilities:
    - Liabilities
""")
"""Settings used when no configuration file overrides them."""


def merge(base, override):
    """Recursively update a copy of `base` with `override`.

    Nested dictionaries are merged key by key, any other value in
    `override` replaces the one in `base`.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def load_config(path=None):
    """Read a YAML configuration file over the defaults.

    Parameters:
        path (str): Config file. When ``None`` the file at
            :data:`DEFAULT_PATH` is used if it exists.

    Returns:
        dict: Complete configuration.
    """
    if path is None:
        if not os.path.isfile(DEFAULT_PATH):
            return copy.deepcopy(DEFAULT_CONFIG)
        path = DEFAULT_PATH

    with open(path, 'r') as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError('{} does not hold a YAML mapping'.format(path))

    return merge(DEFAULT_CONFIG, config)


def setup_logging(config):
    """Apply the ``logging`` section of a configuration."""
    logging.config.dictConfig(config.get('logging', DEFAULT_CONFIG['logging']))


def net_worth_options(config):
    """Keyword arguments for :func:`reports.net_worth_report`."""
    section = config.get('networth', {})
    defaults = DEFAULT_CONFIG['networth']
    return {
        'commodity': section.get('commodity', defaults['commodity']),
        'assets': tuple(section.get('assets', defaults['assets'])),
        'liabilities': tuple(
            section.get('liabilities', defaults['liabilities'])
        ),
    }
