from setuptools import setup, find_packages

from storebatch import PROGRAM_NAME, PROGRAM_OWNER_NAME, PROGRAM_OWNER_EMAIL, PROGRAM_URL

setup(
    name=PROGRAM_NAME.lower(),
    version="0.3",
    description="Run batch map, reduce, filter, and join operations over objects in remote or local storage",
    author=PROGRAM_OWNER_NAME,
    author_email=PROGRAM_OWNER_EMAIL,
    url=PROGRAM_URL,
    python_requires=">=3.12",
    packages=find_packages(include=["storebatch", "storebatch.*"]),
    install_requires=[
        "aiohttp>=3.9,<3.14",
        "yarl>=1.9",
        "tqdm>=4.66",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "aioresponses>=0.7.6",
            "Faker>=24.0",
        ],
    },
)
