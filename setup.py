#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import find_packages, setup

with open('README.md', encoding='utf8') as readme_file:
    readme = readme_file.read()


setup(
    name='blackbeard',
    version='0.2.0',
    description="Pirate Metrics client: record acquisitions, activations, retentions, referrals and revenues.",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="Blackbeard contributors",
    url='https://github.com/onmodulus/blackbeard',
    packages=find_packages(include=['blackbeard', 'blackbeard.*']),
    entry_points={
        'console_scripts': [
            'blackbeard=blackbeard.cli:main'
        ]
    },
    include_package_data=True,
    install_requires=[
        'httpx',
        'pydantic>=2.0',
        'rich',
        'typer>=0.12.1',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    python_requires=">=3.9",
    license="MIT license",
    zip_safe=False,
    keywords='blackbeard pirate-metrics analytics',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
