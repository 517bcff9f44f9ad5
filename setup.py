from setuptools import setup, find_packages

setup(
    name="signalmice",
    version="1.0.0",
    description="Agent that powers off its host when a signal key appears in Redis",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["run"],
    python_requires=">=3.8",
    install_requires=[
        "Flask==2.3.3",
        "flask-restx==1.3.0",
        "Werkzeug==2.3.7",
        "requests>=2.31.0",
        "redis>=5.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "signalmice=run:main",
        ],
    },
)
