# Copyright Amazon.com and its affiliates; all rights reserved. This file is Amazon Web Services Content and may not be duplicated or distributed without permission.
# SPDX-License-Identifier: MIT-0
import setuptools

with open('README.md', encoding='utf-8') as fp:
    long_description = fp.read()

setuptools.setup(
    name='athena-query-action',
    version='1.0.0',
    description='A pipeline step that runs an Amazon Athena query once per change, tracking query fingerprints in DynamoDB',
    long_description=long_description,
    long_description_content_type='text/markdown',
    url='https://github.com/cebollia/athena-query-action',
    packages=setuptools.find_packages(exclude=['test', 'test.*']),
    install_requires=[
        'boto3>=1.28.0',
        'botocore>=1.31.0',
        'python-dateutil>=2.8.2',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
            'moto[athena,dynamodb]>=5.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'athena-query-action=athena_query.action:main',
        ],
    },
    python_requires='>=3.9',
    keywords='athena-query-action aws athena dynamodb sql ci pipeline idempotent',
    license='MIT-0',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Database',
        'Topic :: Utilities',
    ],
)
