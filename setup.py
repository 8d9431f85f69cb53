from setuptools import setup, find_packages

setup(
    name="luamin-sourcemap",
    version="0.1.0",
    description="Lua minifier with source maps and require() bundling",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "luaparser>=4,<5",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "luamin=luamin.cli:main",
        ]
    },
    python_requires=">=3.10",
)
