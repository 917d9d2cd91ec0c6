"""Read formula lines from input files, plain or archived."""
from pathlib import Path
import tarfile
import tempfile
from typing import List, Tuple
import zipfile

import py7zr
from pydantic import FilePath

from formula_parser.common.errors import FormulaInputError
from formula_parser.common.logger import logger
from formula_parser.common.models import InputLine

COMMENT_PREFIX = "#"
TEXT_SUFFIX = ".txt"

# (source name, decoded text) of every text file found in an input
TextMember = Tuple[str, str]


def split_lines(content: str, source: str) -> List[InputLine]:
    """
    Split a text into numbered formula lines, dropping empty lines and ``#`` comments.

    Line numbers are those of the text, so they still point at the right line
    once blanks and comments are gone.

    :param str content: Raw file text
    :param str source: Name reported for these lines

    :return: Formula lines in file order
    :rtype: List[InputLine]
    """
    lines: List[InputLine] = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if line and not line.startswith(COMMENT_PREFIX):
            lines.append(InputLine(source=source, line=line_number, text=line))
    return lines


def _zip_members(archive_path: Path) -> List[TextMember]:
    with zipfile.ZipFile(archive_path, "r") as zf:
        names = sorted(name for name in zf.namelist() if name.endswith(TEXT_SUFFIX))
        return [(name, zf.read(name).decode("utf-8")) for name in names]


def _tar_xz_members(archive_path: Path) -> List[TextMember]:
    with tarfile.open(archive_path, "r:xz") as tf:
        members = sorted(
            (member for member in tf.getmembers() if member.isfile() and member.name.endswith(TEXT_SUFFIX)),
            key=lambda member: member.name,
        )
        return [(member.name, tf.extractfile(member).read().decode("utf-8")) for member in members]


def _7z_members(archive_path: Path) -> List[TextMember]:
    with py7zr.SevenZipFile(archive_path, mode="r") as archive:
        names = sorted(name for name in archive.getnames() if name.endswith(TEXT_SUFFIX))
        if not names:
            return []
        # py7zr only extracts to disk
        with tempfile.TemporaryDirectory() as tmpdir:
            archive.extract(path=tmpdir, targets=names)
            return [(name, (Path(tmpdir) / name).read_text(encoding="utf-8")) for name in names]


def read_text_members(input_file: FilePath) -> List[TextMember]:
    """
    Return every text file of an input, by name.

    A ``.txt`` input is its own single member. Archives (``.zip``, ``.tar.xz``, ``.7z``)
    contribute all their ``.txt`` members, sorted by member name.

    :param FilePath input_file: Path to a ``.txt`` file or a supported archive

    :return: (name, text) pairs
    :rtype: List[TextMember]
    :raises FormulaInputError: If the format is unsupported or the archive holds no .txt file
    """
    input_file = Path(input_file)
    if input_file.suffix == TEXT_SUFFIX:
        return [(input_file.name, input_file.read_text(encoding="utf-8"))]

    if input_file.suffix == ".zip":
        members = _zip_members(input_file)
    elif input_file.suffixes[-2:] == [".tar", ".xz"]:
        members = _tar_xz_members(input_file)
    elif input_file.suffix == ".7z":
        members = _7z_members(input_file)
    else:
        raise FormulaInputError(f"📄❌ Unsupported input format {input_file.suffix!r}", str(input_file))

    if not members:
        raise FormulaInputError("📄❌ No .txt file found in archive", str(input_file))
    return members


def read_input(input_file: FilePath) -> List[InputLine]:
    """
    Read all formula lines of an input file.

    :param FilePath input_file: Path to a ``.txt`` file or a supported archive

    :return: Formula lines, file by file, in line order
    :rtype: List[InputLine]
    :raises FormulaInputError: If the input cannot be read as formulas
    """
    lines: List[InputLine] = []
    for name, content in read_text_members(input_file):
        member_lines = split_lines(content, name)
        logger.info(f"📄 {name}: {len(member_lines)} formulas")
        lines.extend(member_lines)
    return lines
