from setuptools import setup, find_packages

setup(
    name="pixnovel",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["translate_novel"],
    package_data={"pixnovel": ["config.yaml"]},
    install_requires=[
        "pydantic>=2",
        "pyyaml",
        "python-dotenv",
        "rich",
        "scrapy",
        "beautifulsoup4",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.9",
)
