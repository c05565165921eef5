# SPDX-License-Identifier: Apache-2.0
from setuptools import setup, find_namespace_packages

setup(
    name="africa-research-base",
    version="0.1.0",
    description="Research dataset sharing with AI quality scoring, peer review and contributor points",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["arbase", "arbase.*", "arbase_sdk", "arbase_sdk.*"]),
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "sqlmodel>=0.0.16,<0.0.45",
        "sqlalchemy>=2.0",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-multipart>=0.0.9",
        "slowapi>=0.1.9",
        "redis>=5.0",
        "python-jose[cryptography]>=3.3",
        "passlib>=1.7.4",
        "anthropic>=0.30",
        "httpx>=0.27",
        "solders>=0.21",
        "requests>=2.31",
        "click>=8.1",
    ],
    extras_require={
        "test": ["pytest>=8.0", "httpx>=0.27"],
    },
    entry_points={"console_scripts": ["arbase=arbase_sdk.cli:main"]},
)
