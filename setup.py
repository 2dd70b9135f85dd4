# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="skimap",
    version="0.1.0",
    description="Disk usage analyzer with scan caching and squarified treemap layout",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["skimap", "skimap.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'skimap=skimap.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
