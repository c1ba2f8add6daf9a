import setuptools
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
readme_text = (this_directory / "README.md").read_text()
requirements = (this_directory / "requirements.txt").read_text().splitlines()

setuptools.setup(
    include_package_data=True,
    name="sp3analysis",
    version="0.1.0",
    description="python module for reading, merging, interpolating and writing SP3 precise orbit files",
    author="Geoscience Australia",
    author_email="GNSSAnalysis@ga.gov.au",
    package_data={"sp3analysis": ["py.typed"]},
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={"test": ["pytest", "pyfakefs"]},
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "sp3merge = sp3analysis:gn_utils.sp3merge",
            "sp3transpose = sp3analysis:gn_utils.sp3transpose",
            "sp3interp = sp3analysis:gn_utils.sp3interp",
            "sp3info = sp3analysis:gn_utils.sp3info",
        ]
    },
    long_description=readme_text,  # Provide entire contents of README to long_description
    long_description_content_type="text/markdown",
)
