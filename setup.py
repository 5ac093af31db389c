import os
from setuptools import setup, find_packages

HERE = os.path.dirname(os.path.abspath(__file__))

def parse_requirements(requirements):
    with open(os.path.join(HERE, requirements)) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='accountapi_client',
    version='0.1.0',
    description='Async client for the accounts REST API',
    python_requires='>=3.9',
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "respx>=0.20",
        ],
    },
    package_dir={"": "src"},
    packages=find_packages("src"),
    entry_points={
        "console_scripts": [
            "accountapi=accountapi_client.cli:cli",
        ],
    }
)
