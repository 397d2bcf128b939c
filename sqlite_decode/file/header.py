from abc import ABCMeta
from abc import abstractmethod
from logging import getLogger
from re import sub
from sqlite_decode.constants import LOGGER_NAME

"""

header.py

This script holds an abstract class for file header objects to extend and inherit from.  The database file header
extends this class.

Note:  The database file header is the first 100 bytes of the first page of the database file.  The b-tree page
       header of the first page follows directly after it.

This script holds the following object(s):
SQLiteHeader(object)

"""


class SQLiteHeader(object, metaclass=ABCMeta):

    def __init__(self):
        self.page_size = None
        self.md5_hex_digest = None

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    @abstractmethod
    def stringify(self, padding=""):
        log_message = "The abstract method stringify was called directly and is not implemented."
        getLogger(LOGGER_NAME).error(log_message)
        raise NotImplementedError(log_message)
