# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="filescope",
    version="0.1.0",
    description="Bounded-concurrency file analysis pipeline with retries and performance tracking",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["filescope", "filescope.*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests",  # Remote LLM analyzer
        "tiktoken",  # Token estimation
        "psutil",  # Memory figures of the performance report
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'filescope=filescope.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
