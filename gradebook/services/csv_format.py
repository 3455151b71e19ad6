from __future__ import annotations
import codecs
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SAMPLE_BYTES = 2048
QUOTE_CHAR = '"'


@dataclass(frozen=True)
class CsvFormat:
    delimiter: str = ","
    quotechar: str = QUOTE_CHAR


def _first_line(data: bytes) -> bytes:
    sample = data[:SAMPLE_BYTES]
    for terminator in (b"\r", b"\n"):
        pos = sample.find(terminator)
        if pos != -1:
            sample = sample[:pos]
    return sample


def detect_format(data: bytes) -> CsvFormat:
    """Pick ';' or ',' from the header line of the upload.

    Spreadsheet exports from some locales use ';'. The choice is made once for
    the whole file, before any row is split.
    """
    # final=False: a multi-byte character cut by the sample boundary is not an error
    decoder = codecs.getincrementaldecoder("utf-8-sig")()
    try:
        sample = decoder.decode(_first_line(data), final=False)
    except UnicodeDecodeError as e:
        logger.warning("Could not read header sample (%s), assuming ','", e)
        return CsvFormat(delimiter=",")

    delimiter = ";" if sample.count(";") > sample.count(",") else ","
    logger.debug("Detected delimiter %r from header sample", delimiter)
    return CsvFormat(delimiter=delimiter)
