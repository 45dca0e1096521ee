"""Read batch inputs: plain text files or archives holding one."""
from pathlib import Path
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr

from arithmetic_evaluator.common.logger import logger


def read_text(input_file: Path) -> str:
    """
    Return the text of a plain .txt file, or of the first .txt file of an archive.

    :param Path input_file: Path to the input file or archive

    :return: File content
    :rtype: str
    :raises ValueError: If the archive format is unsupported or contains no .txt file
    """
    if input_file.suffix == ".txt":
        return input_file.read_text(encoding="utf-8")
    return extract_archive(input_file)


def read_expressions(input_file: Path) -> List[str]:
    """
    Read the non-empty, stripped lines of a batch input.

    :param Path input_file: Path to the input file or archive

    :return: One expression per non-empty line
    :rtype: List[str]
    """
    lines = read_text(input_file).splitlines()
    expressions = [line.strip() for line in lines if line.strip()]
    logger.info(f"📄 Read {len(expressions)} expressions from {input_file}")
    return expressions


def extract_archive(archive_path: Path) -> str:
    """
    Extract the first .txt file found in a supported archive and return its content as a string.

    Supported formats:
    - .zip
    - .tar.xz
    - .7z

    :param Path archive_path: Path to the archive file

    :return: Content of the extracted .txt file
    :rtype: str
    :raises ValueError: If no .txt file is found or format is unsupported
    """
    # Extract into a temporary directory, removed once the text is read
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)
        if archive_path.suffix == ".zip":
            with zipfile.ZipFile(archive_path, "r") as zf:
                txt_files = [f for f in zf.namelist() if f.endswith(".txt")]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in zip archive")
                zf.extract(txt_files[0], path=tmpdir_path)
                return (tmpdir_path / txt_files[0]).read_text(encoding="utf-8")

        if archive_path.suffixes[-2:] == [".tar", ".xz"]:
            with tarfile.open(archive_path, "r:xz") as tf:
                txt_members = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
                if not txt_members:
                    raise ValueError("📄❌ No .txt file found in tar.xz archive")
                tf.extract(txt_members[0], path=tmpdir_path, filter="data")
                return (tmpdir_path / txt_members[0].name).read_text(encoding="utf-8")

        if archive_path.suffix == ".7z":
            with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                txt_files = [f for f in archive.getnames() if f.endswith(".txt")]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in 7z archive")
                archive.extract(targets=[txt_files[0]], path=tmpdir_path)
                return (tmpdir_path / txt_files[0]).read_text(encoding="utf-8")

        raise ValueError(f"📄❌ Unsupported input format: {''.join(archive_path.suffixes) or archive_path.name}")
