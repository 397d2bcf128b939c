import logging
import warnings
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode._version import __version__

"""

__init__.py

This package will have scripts for overall usage throughout the SQLite Decode library allowing the functionality
to decode the header, b-tree pages and records of a SQLite database file and access to underlying functions through
an interface.

This init script will initialize the logger for this library with a NullHandler to prevent unexpected output
from applications that may not be implementing logging.  It will also ignore warnings reported by the python
warning by default.  (Warnings are also thrown to the logger when they occur in addition to the warnings
framework.)

Note:  This library will use warnings for format irregularities that do not prevent decoding such as unexpected
       payload fractions.  To turn off warnings use the "-W ignore" option.  See the Python documentation for further
       options.

"""


# Import interface as api
from sqlite_decode.interface import *


def null_logger():

    # Get the logger from the LOGGER_NAME constant and add the NullHandler to it
    logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())

    # Ignore warnings by default
    warnings.filterwarnings("ignore")


null_logger()
