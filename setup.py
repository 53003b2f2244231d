#!/usr/bin/env python3
"""
Setup script for yamlgraph.

yamlgraph is pure Python; reading and writing YAML text is done through
PyYAML's event parser and emitter.

Install for development with test dependencies:
    pip install -e .[test]
"""

import os
import re
from setuptools import setup


def read_version():
    """Read __version__ from the package without importing it."""
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                        'yamlgraph', '__init__.py')
    with open(path, encoding='utf-8') as f:
        match = re.search(r"^__version__ = '([^']+)'", f.read(), re.M)
    return match.group(1)


setup(
    name='python-yamlgraph',
    version=read_version(),
    description='Object-graph serialization through a tagged YAML syntax tree',
    packages=['yamlgraph'],
    package_data={'yamlgraph': ['*.pyi']},
    python_requires='>=3.8',
    install_requires=['PyYAML>=5.1'],
    extras_require={'test': ['pytest']},
)
