from setuptools import setup, find_packages

setup(
    name="terminal-karaoke",
    version="0.1.0",
    description="Type out timed LRC lyrics in your terminal, with a beat pulse and a little finale",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    license="MIT",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"terminal_karaoke": ["py.typed"]},
    install_requires=[
        "colorama>=0.4.6",
        "typer",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "ruff",
            "mypy",
        ]
    },
    entry_points={
        "console_scripts": [
            "terminal-karaoke=terminal_karaoke.cli:main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Terminals",
    ],
    keywords="lyrics terminal karaoke lrc typewriter ansi",
)
