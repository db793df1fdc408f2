from setuptools import setup, find_packages

setup(
    name="redis-lru",
    version="0.1.0",
    description="Bounded LRU/LFU cache on top of Redis",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "redis>=5.0.1",
        "structlog>=24.1.0",
        "orjson>=3.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    python_requires=">=3.9",
)
