"""
Setup script for the job board data layer.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="gov-job-board",
    version="0.1.0",
    packages=find_packages(include=["jobboard", "jobboard.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pymongo>=4.6,<4.11",  # newer UpdateOne passes `sort`, unsupported by mongomock
        "python-dotenv>=1.0",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "redis>=5.0",
        "cryptography>=42.0",
        "tenacity>=8.2",
        "typing_extensions>=4.9",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "mongomock>=4.1",
            "httpx>=0.27",
        ],
    },
)
