import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("exactcbor/version.py", "r") as fh:
    version = fh.read().strip().strip('"')

setuptools.setup(
    name="exactcbor",
    version=version,
    author="exactcbor contributors",
    description="CBOR data items with exact arbitrary precision decimal, binary and rational numbers.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(),
    platforms=['any'],
    python_requires='>=3.8',
    # NOTE:  No runtime dependencies.  The codec, the numbers and the JSON bridge are all standard library.
    extras_require={
        'test': [
            'hypothesis',
            'cbor2',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: CC0 1.0 Universal (CC0 1.0) Public Domain Dedication",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Internet",
            # RFC 8949 CBOR
            # General Decimal Arithmetic
            # bignum, bigfloat, decimal fraction, rational
    ],
)
