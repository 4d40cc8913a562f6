# ABOUTME: Shared pytest fixtures for bookmeta tests.
# ABOUTME: Provides sample EPUB, MOBI, PDF and CBZ files (valid and corrupt).

import zipfile
from pathlib import Path

import pytest
from ebooklib import epub
from pypdf import PdfWriter

from tests.fixtures.mobi_builder import PNG_BYTES, build_mobi, exth_record


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_epub(tmp_path: Path) -> Path:
    """Create a minimal valid EPUB file with known metadata."""
    book = epub.EpubBook()

    book.set_identifier("test-isbn-978-0-123456-47-2")
    book.set_title("The Name of the Rose")
    book.set_language("en")
    book.add_author("Umberto Eco")

    book.add_metadata("DC", "publisher", "Harcourt")
    book.add_metadata("DC", "description", "A mystery set in a medieval monastery.")
    book.add_metadata("DC", "subject", "Mystery")
    book.add_metadata("DC", "subject", "Historical")
    book.add_metadata("DC", "date", "1980-09-01")
    book.add_metadata(None, "meta", "", {"name": "calibre:series", "content": "Monastery"})
    book.add_metadata(None, "meta", "", {"name": "calibre:series_index", "content": "2"})

    # Add a minimal chapter so the EPUB is structurally valid
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    filepath = tmp_path / "name_of_the_rose.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """Create a corrupt file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def minimal_epub(tmp_path: Path) -> Path:
    """Create an EPUB with minimal metadata (only title)."""
    book = epub.EpubBook()
    book.set_identifier("minimal-id")
    book.set_title("Untitled Book")
    book.set_language("en")

    chapter = epub.EpubHtml(title="Content", file_name="content.xhtml", lang="en")
    chapter.content = b"<html><body><p>Minimal content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("content.xhtml", "Content", "content")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    filepath = tmp_path / "minimal.epub"
    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture
def alice_mobi_bytes() -> bytes:
    """A MOBI file modeled on a real Alice's Adventures in Wonderland conversion."""
    return build_mobi(
        title="Alice's Adventures in Wonderland",
        exth_records=[
            exth_record(100, "Lewis Carroll"),
            exth_record(100, "Tim Burton"),
            exth_record(101, "Oxford"),
            exth_record(103, "Alice falls down a rabbit hole."),
            exth_record(104, "9780194229647"),
            exth_record(105, "Fictions"),
            exth_record(105, "Classics"),
            exth_record(106, "1865-11-26"),
            exth_record(108, "calibre (6.0.0)"),
            exth_record(113, "B000JQU1VS"),
            exth_record(201, 0),
            exth_record(202, 1),
            exth_record(524, "en"),
            exth_record(9999, 7),
        ],
        first_image_index=2,
        extra_records=[b"t" * 100, PNG_BYTES, b"thumbnail-bytes"],
    )


@pytest.fixture
def sample_mobi(tmp_path: Path, alice_mobi_bytes: bytes) -> Path:
    filepath = tmp_path / "alice.mobi"
    filepath.write_bytes(alice_mobi_bytes)
    return filepath


@pytest.fixture
def corrupt_mobi(tmp_path: Path) -> Path:
    """A .mobi file whose record 0 has no MOBI magic."""
    filepath = tmp_path / "corrupt.mobi"
    filepath.write_bytes(build_mobi(magic=b"XXXX"))
    return filepath


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    writer = PdfWriter()
    for _ in range(4):
        writer.add_blank_page(width=72, height=72)
    writer.add_metadata(
        {
            "/Title": "Example PDF",
            "/Author": "Ewilan Rivière",
            "/Subject": "An example document.",
            "/Keywords": "example, test",
            "/Publisher": "Kiwilan",
            "/CreationDate": "D:20230321074427+00'00'",
        }
    )
    filepath = tmp_path / "example.pdf"
    with open(filepath, "wb") as f:
        writer.write(f)
    return filepath


@pytest.fixture
def sample_cbz(tmp_path: Path) -> Path:
    comic_info = (
        "<?xml version='1.0' encoding='utf-8'?>"
        "<ComicInfo>"
        "<Title>The Long Halloween</Title>"
        "<Series>Batman</Series>"
        "<Number>3</Number>"
        "<Writer>Jeph Loeb</Writer>"
        "<Penciller>Tim Sale</Penciller>"
        "<Publisher>DC Comics</Publisher>"
        "<Summary>A year of murders.</Summary>"
        "<LanguageISO>en</LanguageISO>"
        "<Genre>Superhero, Crime</Genre>"
        "<Year>1996</Year><Month>12</Month>"
        "</ComicInfo>"
    )
    filepath = tmp_path / "long_halloween.cbz"
    with zipfile.ZipFile(filepath, "w") as archive:
        archive.writestr("ComicInfo.xml", comic_info)
        archive.writestr("page02.png", b"second page")
        archive.writestr("page01.png", PNG_BYTES)
    return filepath


@pytest.fixture
def calibre_tree(tmp_path: Path) -> Path:
    """Create a Calibre-style directory tree with mixed ebook formats.

    Layout:
        Calibre Library/
            Umberto Eco/
                The Name of the Rose (2739)/
                    The Name of the Rose - Umberto Eco.epub
                    The Name of the Rose - Umberto Eco.mobi
                    cover.jpg
                    metadata.opf
            Frank Herbert/
                Dune (42)/
                    Dune - Frank Herbert.azw3
                    metadata.opf
            Unknown/
                Mystery Book (99)/
                    Mystery Book - Unknown.pdf
    """
    root = tmp_path / "Calibre Library"

    book1 = root / "Umberto Eco" / "The Name of the Rose (2739)"
    book1.mkdir(parents=True)
    (book1 / "The Name of the Rose - Umberto Eco.epub").write_bytes(b"fake epub")
    (book1 / "The Name of the Rose - Umberto Eco.mobi").write_bytes(build_mobi())
    (book1 / "cover.jpg").write_bytes(b"fake jpg")
    (book1 / "metadata.opf").write_text("<metadata/>")

    book2 = root / "Frank Herbert" / "Dune (42)"
    book2.mkdir(parents=True)
    (book2 / "Dune - Frank Herbert.azw3").write_bytes(build_mobi(title="Dune"))
    (book2 / "metadata.opf").write_text("<metadata/>")

    book3 = root / "Unknown" / "Mystery Book (99)"
    book3.mkdir(parents=True)
    (book3 / "Mystery Book - Unknown.pdf").write_bytes(b"%PDF-1.4 fake")

    return root
