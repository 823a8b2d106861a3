#!/usr/bin/env python

"""The setup script."""

import io
import re
from os import path
from setuptools import setup, find_packages

here = path.abspath(path.dirname(__file__))

with io.open(path.join(here, 'README.md'), encoding='utf-8') as readme_file:
    readme = readme_file.read()

with io.open(path.join(here, 'charmcatalog', '__init__.py'), encoding='utf-8') as init_file:
    version = re.search(r'__version__ = "([^"]+)"', init_file.read()).group(1)

# get the dependencies and installs
with io.open(path.join(here, "requirements.txt"), encoding="utf-8") as f:
    all_reqs = f.read().split("\n")

install_requires = [x.strip() for x in all_reqs if x.strip() and not x.startswith("#")]

test_requirements = [
    'pytest>=8.0',
    'pytest-asyncio>=0.23',
    'httpx>=0.27',
]

setup(
    python_requires='>=3.10',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'Natural Language :: English',
        'Framework :: FastAPI',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    description="Catalog service resolving partial charm and bundle references.",
    entry_points={
        'console_scripts': [
            'charm-catalog=charmcatalog.__main__:main',
            'catalog-admin=charmcatalog.admin_cli:main',
        ],
    },
    install_requires=install_requires,
    extras_require={
        'test': test_requirements,
    },
    long_description=readme,
    long_description_content_type='text/markdown',
    include_package_data=True,
    keywords='charm bundle catalog',
    name='charm-catalog',
    packages=find_packages(include=['charmcatalog', 'charmcatalog.*']),
    test_suite='tests',
    tests_require=test_requirements,
    version=version,
    zip_safe=False,
)
