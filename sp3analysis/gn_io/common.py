"""Base functions for file reading and writing"""

import gzip as _gzip
import logging as _logging
from pathlib import Path as _Path
from typing import Union as _Union

import unlzw3 as _unlzw3

logger = _logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
LZW_MAGIC = b"\x1f\x9d"


def path2bytes(path_or_bytes: _Union[_Path, str, bytes]) -> bytes:
    """Main file reading function. Checks file extension and calls appropriate reading function.
    Passes through bytes if given, thus one may not routinely leave it in the top of the specific
     file reading function and be able to call it with bytes or str path without additional modifications.

    :param Path | str | bytes path_or_bytes: input file path as a Path or string, or bytes object to pass through
    :return bytes: bytes object, decompressed if necessary
    :raise FileNotFoundError: path didn't resolve to a file
    :raise Exception: wrapped exception for all other exceptions raised
    :raise EOFError: if input bytes is empty, input file is empty, or decompressed result of input file is empty.
    """
    if isinstance(path_or_bytes, bytes):  # no reading is necessary - pass through.
        if len(path_or_bytes) == 0:
            raise EOFError("Input bytes object was empty!")
        return path_or_bytes

    if isinstance(path_or_bytes, _Path):
        path_string = path_or_bytes.as_posix()
    elif isinstance(path_or_bytes, str):
        path_string = path_or_bytes
    else:
        raise TypeError("Must be Path, str, or bytes")

    try:
        if path_string.endswith(".Z"):
            databytes = _lzw2bytes(path_string)
        elif path_string.endswith(".gz"):
            databytes = _gz2bytes(path_string)
        else:
            databytes = _txt2bytes(path_string)
    except FileNotFoundError as fe:
        raise fe
    except Exception as e:
        raise Exception(f"Error reading file '{path_string}'. Exception: {e}")

    if len(databytes) == 0:
        raise EOFError(f"Input file (or decompressed result of it) was empty. Path: '{path_string}'")
    return databytes


def decompress_bytes(databytes: bytes) -> bytes:
    """Decompresses gzip or LZW (.Z) content recognised by its magic number, passing anything else through.
    This is the default decompression capability used by the SP3 reader for in-memory input.

    :param bytes databytes: possibly compressed content
    :return bytes: decompressed content
    """
    if databytes[:2] == GZIP_MAGIC:
        logger.debug("Decompressing gzip content")
        return _gzip.decompress(databytes)
    if databytes[:2] == LZW_MAGIC:
        logger.debug("Decompressing LZW content")
        return _unlzw3.unlzw(databytes)
    return databytes


def bytes2path(databytes: bytes, path: _Union[_Path, str], compress: _Union[bool, None] = None) -> None:
    """Writes bytes to a file, gzip compressing them if the path ends in .gz (or if compress is set)

    :param bytes databytes: content to write
    :param Path | str path: destination path
    :param bool | None compress: force compression on or off. Default None decides from the extension.
    """
    path = _Path(path)
    if compress is None:
        compress = path.suffix == ".gz"
    if compress:
        with _gzip.open(path, mode="wb") as gz_file:
            gz_file.write(databytes)
    else:
        with open(path, "wb") as file:
            file.write(databytes)
    logger.info(f"Wrote {len(databytes)} bytes to '{path}'{' (gzip compressed)' if compress else ''}")


def _lzw2bytes(path: str) -> bytes:
    """Simple reading function for LZW-compressed files (.Z) using unlzw3 module

    :param str path: path of file to read
    :return bytes: read bytes object
    """
    with open(path, "rb") as lzw_file:
        lzw_compressed = lzw_file.read()
    return _unlzw3.unlzw(lzw_compressed)


def _gz2bytes(path: str) -> bytes:
    """Simple reading function for gz-compressed files

    :param str path: path of file to read
    :return bytes: read bytes object
    """
    with _gzip.open(filename=path, mode="rb") as gz_file:
        databytes = gz_file.read()
    return databytes


def _txt2bytes(path: str) -> bytes:
    """Simple reading function for uncompressed files

    :param str path: path of file to read
    :return bytes: read bytes object
    """
    with open(path, "rb") as file:
        databytes = file.read()
    return databytes
