import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="json_schema_standard",
    version="1.0.0",
    description="Compile a dialect independent schema AST to JSON Schema (Draft-07, 2020-12, OpenAPI 3.1) and back",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Text Processing",
        "Intended Audience :: Developers",
    ],
    keywords="json schema openapi draft-07 2020-12 ast code generation",
    url="https://github.com/madlag/json_schema_standard",
    author="François Lagunas",
    author_email="francois.lagunas@gmail.com",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0.0",
        "jinja2>=3.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "json_schema_standard=json_schema_standard.json_schema_standard:json_schema_standard",
        ],
    },
    include_package_data=True,
    package_data={
        "json_schema_standard": ["templates/*/*.jinja2", "tests/test_data/*.json"],
    },
    zip_safe=False,
)
