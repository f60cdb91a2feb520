"""
Setup configuration for character-image-resolver component.
"""

from setuptools import setup, find_packages

setup(
    name='character-image-resolver',
    version='1.0.0',
    description='Character image resolution with caching, admission control and generation fallback',
    author='Numberblock Finder Team',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.11',
    install_requires=[
        'boto3>=1.28.0',
        'botocore>=1.31.0',
        'requests>=2.31.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.21.0',
            'pytest-cov>=4.1.0',
            'moto>=5.0.0',
            'pylint>=2.17.0',
            'flake8>=6.0.0',
            'black>=23.0.0',
            'mypy>=1.4.0',
        ]
    }
)
