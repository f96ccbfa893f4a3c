"""pyledgerquery setup file"""

from setuptools import setup


def readme():
    with open('README.md') as f:
        return f.read()


setup(
    name='pyledgerquery',
    version='0.2',
    description='Python based parsing and reporting for ledger journals.',
    long_description=readme(),
    long_description_content_type='text/markdown',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: Public Domain',
        'Programming Language :: Python :: 3',
        'Topic :: Office/Business :: Financial :: Accounting',
    ],
    keywords='ledger-cli plaintextaccounting',
    url='http://github.com/cgiacofei/pyledgerquery',
    author='Chris Giacofei',
    author_email='c.giacofei@gmail.com',
    license='Public Domain',
    packages=['pyledgerquery'],
    install_requires=[
        'PyYaml',
    ],
    extras_require={
        'test': ['pytest'],
    },
    include_package_data=True,
    zip_safe=False,
)
