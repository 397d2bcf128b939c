import os
from setuptools import setup

"""

setup.py

This script will be used to setup the sqlite_decode package for use in python environments.

Note:  To compile a distribution for the project run "python setup.py sdist" in the directory this file is located in.
To also build the wheel, run "python setup.py sdist bdist_wheel".

Note: openpyxl is needed for the xlsx export and will install et-xmlfile as a dependency.

Note: The tests are run with pytest which is installed through the "test" extra.

"""

# Imports the __version__ since the package references don't yet exist in the scope of setup.py. It opens the file
# and interprets the code so the __version__ variable is populated, despite IDE warnings that it's undefined.
exec(open('sqlite_decode/_version.py').read())

# The text of the README file
README = open(os.path.join(os.path.dirname(__file__), 'README.md')).read()

setup(name="sqlite_decode",
      version=os.environ.get('TAG_VERSION', __version__),  # noqa: F821
      description="This package allows decoding of the b-tree pages and records of SQLite database files",
      long_description=README,
      long_description_content_type="text/markdown",
      packages=["sqlite_decode",
                "sqlite_decode.file",
                "sqlite_decode.file.database",
                "sqlite_decode.export"],
      classifiers=[
          "Programming Language :: Python :: 3"
      ],
      python_requires=">=3.7",
      entry_points={
          'console_scripts': ['sqlite_decode=sqlite_decode.entrypoint:cli'],
      },
      install_requires=[
          "openpyxl",
          "ConfigArgParse"
      ],
      extras_require={
          "test": ["pytest"]
      },
      zip_safe=False
      )
