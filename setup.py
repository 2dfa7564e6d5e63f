from setuptools import setup, find_packages

setup(
    name="codetimer",
    version="0.1.0",
    packages=find_packages(include=["codetimer", "codetimer.*"]),
    python_requires=">=3.8",
    install_requires=[],
)
