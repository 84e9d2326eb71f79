"""
Tests for CatalogService

Exercises the service directly (no HTTP): sorting, search, sampling,
normalization, uniqueness and cover handling.
"""

import pytest

from catalog.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from catalog.models import Book
from catalog.schemas.book import BookCreate, BookUpdate
from catalog.services.catalog import CatalogService, normalize_field, parse_isbn
from catalog.services.covers import CoverStore, CoverUpload

JPEG = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


def new_book(**overrides) -> BookCreate:
    data = {
        "isbn": "9780140449136",
        "title": "  crimen y castigo ",
        "author": "fiódor dostoievski",
        "publisher": "",
        "publication_year": "",
        "location": "c-r03",
    }
    data.update(overrides)
    return BookCreate.model_validate(data)


class TestNormalization:
    """Tests for normalize_field / parse_isbn."""

    @pytest.mark.parametrize(
        "name, sentinel",
        [
            ("author", "S.A"),
            ("publisher", "S.E"),
            ("publication_year", "S.F"),
            ("location", "---"),
        ],
    )
    def test_empty_field_becomes_sentinel(self, name, sentinel):
        assert normalize_field(name, "   ") == sentinel

    def test_text_is_trimmed_and_upper_cased(self):
        assert normalize_field("author", "  julio cortázar ") == "JULIO CORTÁZAR"

    def test_parse_isbn_rejects_blank_and_text(self):
        with pytest.raises(InvalidArgumentError):
            parse_isbn(" ")
        with pytest.raises(InvalidArgumentError):
            parse_isbn("97-8")

    def test_parse_isbn_accepts_digits(self):
        assert parse_isbn(" 9505043651 ") == 9505043651


class TestQueries:
    """count, list_all, search, get_by_isbn."""

    def test_count(self, catalog, multiple_books):
        assert catalog.count() == len(multiple_books)

    def test_count_empty(self, catalog):
        assert catalog.count() == 0

    def test_default_sort_is_title(self, catalog, multiple_books):
        titles = [book.title for book in catalog.list_all()]
        assert titles == sorted(titles)

    def test_unknown_sort_key_falls_back_to_title(self, catalog, multiple_books):
        assert catalog.list_all("price") == catalog.list_all("title")

    def test_author_sort_puts_sentinel_last(self, catalog, multiple_books):
        authors = [book.author for book in catalog.list_all("author")]

        assert authors[-2:] == ["S.A", "S.A"]
        assert authors[:-2] == sorted(authors[:-2])

    def test_publisher_sort_puts_sentinel_last(self, catalog, multiple_books):
        publishers = [book.publisher for book in catalog.list_all("publisher")]

        assert publishers[-1] == "S.E"
        assert publishers[:-1] == sorted(publishers[:-1])

    def test_year_sort_is_descending_with_sentinel_last(self, catalog, multiple_books):
        years = [book.publication_year for book in catalog.list_all("publication_year")]

        assert years == ["2001", "1992", "1963", "1944", "S.F"]

    def test_year_sort_accepts_camel_case_alias(self, catalog, multiple_books):
        assert catalog.list_all("publicationYear") == catalog.list_all("publication_year")

    def test_id_sort_is_descending(self, catalog, multiple_books):
        ids = [book.id for book in catalog.list_all("id")]
        assert ids == sorted(ids, reverse=True)

    def test_search_title_substring_case_insensitive(self, catalog, multiple_books):
        results = catalog.search("rayu")
        assert [book.title for book in results] == ["RAYUELA"]

    def test_search_by_author(self, catalog, multiple_books):
        results = catalog.search("borges")
        assert [book.isbn for book in results] == [9789875666283]

    def test_search_by_exact_isbn(self, catalog, multiple_books):
        results = catalog.search("9505043651")
        assert [book.title for book in results] == ["APICULTURA PRÁCTICA"]

    def test_search_by_year_is_exact(self, catalog, multiple_books):
        assert [book.title for book in catalog.search("1963")] == ["RAYUELA"]
        assert catalog.search("196") == []

    def test_search_by_location(self, catalog, multiple_books):
        titles = [book.title for book in catalog.search("e-g")]
        assert titles == ["APICULTURA PRÁCTICA", "MANUAL DE HUERTA"]

    def test_search_results_ordered_by_title(self, catalog, multiple_books):
        titles = [book.title for book in catalog.search("a")]
        assert titles == sorted(titles)

    def test_blank_search_lists_everything(self, catalog, multiple_books):
        assert catalog.search("  ") == catalog.list_all("title")

    @pytest.mark.parametrize("keyword", ["%", "_", "A%G", "E_G"])
    def test_search_wildcards_match_literally(self, catalog, multiple_books, keyword):
        assert catalog.search(keyword) == []

    def test_search_literal_percent_in_title(self, catalog, db_session, multiple_books):
        book = Book(
            isbn=42,
            title="100% ALGODÓN",
            author="S.A",
            publisher="S.E",
            publication_year="S.F",
            location="Z-Z1",
        )
        db_session.add(book)
        db_session.commit()

        assert [b.title for b in catalog.search("0%")] == ["100% ALGODÓN"]

    def test_get_by_isbn(self, catalog, sample_book):
        assert catalog.get_by_isbn("9780307474728").id == sample_book.id

    def test_get_by_isbn_not_found(self, catalog):
        with pytest.raises(NotFoundError, match="Book not found."):
            catalog.get_by_isbn("123")

    def test_get_by_isbn_invalid(self, catalog):
        with pytest.raises(InvalidArgumentError):
            catalog.get_by_isbn("abc")


class TestRandomSample:
    """random_sample returns members of the catalog, never more than asked."""

    def test_sample_size_and_membership(self, catalog, multiple_books):
        sample = catalog.random_sample(3)
        ids = {book.id for book in multiple_books}

        assert len(sample) == 3
        assert len({book.id for book in sample}) == 3
        assert {book.id for book in sample} <= ids

    def test_sample_larger_than_catalog(self, catalog, multiple_books):
        assert len(catalog.random_sample(50)) == len(multiple_books)

    def test_sample_accepts_numeric_string(self, catalog, multiple_books):
        assert len(catalog.random_sample("2")) == 2

    @pytest.mark.parametrize("count", [0, -1, "abc", "1.5", ""])
    def test_sample_invalid_count(self, catalog, multiple_books, count):
        with pytest.raises(InvalidArgumentError):
            catalog.random_sample(count)

    def test_sample_empty_catalog(self, catalog):
        with pytest.raises(NotFoundError, match="No books available."):
            catalog.random_sample(1)

    def test_sample_count_beyond_bigint(self, catalog, multiple_books):
        sample = catalog.random_sample("99999999999999999999")
        assert len(sample) == len(multiple_books)

    def test_sample_count_beyond_bigint_empty_catalog(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.random_sample(10**20)


class TestAdd:
    """Tests for CatalogService.add."""

    def test_add_normalizes_fields(self, catalog):
        book = catalog.add(new_book())

        assert book.title == "CRIMEN Y CASTIGO"
        assert book.author == "FIÓDOR DOSTOIEVSKI"
        assert book.publisher == "S.E"
        assert book.publication_year == "S.F"
        assert book.location == "C-R03"

    def test_add_empty_location_uses_sentinel(self, catalog):
        book = catalog.add(new_book(location=""))
        assert book.location == "---"

    def test_add_duplicate_isbn(self, catalog, sample_book):
        with pytest.raises(ConflictError):
            catalog.add(new_book(isbn=str(sample_book.isbn)))

    def test_add_duplicate_location_after_normalization(self, catalog, sample_book):
        """'a-v10' collides with the stored 'A-V10'."""
        with pytest.raises(ConflictError):
            catalog.add(new_book(location=" a-v10 "))

    def test_add_stores_cover_under_isbn(self, catalog, cover_store):
        catalog.add(new_book(), CoverUpload(filename="Portada.JPG", data=JPEG))

        path = cover_store.path_for("9780140449136.jpg")
        assert path.read_bytes() == JPEG

    def test_add_isbn_conflict_at_commit(self, catalog, sample_book, monkeypatch):
        """The unique constraint still rejects an ISBN the pre-check missed."""
        monkeypatch.setattr(CatalogService, "_find_by_isbn", lambda self, isbn: None)

        with pytest.raises(ConflictError, match="ISBN or location already in use."):
            catalog.add(new_book(isbn=str(sample_book.isbn)))

        assert isinstance(catalog.count(), int)

    def test_add_survives_cover_write_failure(self, catalog, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(CoverStore, "save", fail)

        book = catalog.add(new_book(), CoverUpload(filename="a.jpg", data=JPEG))

        assert catalog.get_by_isbn(book.isbn).id == book.id


class TestUpdate:
    """Tests for CatalogService.update."""

    def test_update_only_supplied_fields(self, catalog, sample_book):
        book = catalog.update(
            "9780307474728", BookUpdate.model_validate({"publisher": "sudamericana"})
        )

        assert book.publisher == "SUDAMERICANA"
        assert book.author == "GABRIEL GARCÍA MÁRQUEZ"
        assert book.location == "A-V10"

    def test_update_empty_field_becomes_sentinel(self, catalog, sample_book):
        book = catalog.update(
            sample_book.isbn, BookUpdate.model_validate({"author": ""})
        )
        assert book.author == "S.A"

    def test_update_keeps_own_location(self, catalog, sample_book):
        book = catalog.update(
            sample_book.isbn,
            BookUpdate.model_validate({"location": "a-v10", "title": "cien años"}),
        )

        assert book.location == "A-V10"
        assert book.title == "CIEN AÑOS"

    def test_update_location_taken_by_other_book(self, catalog, multiple_books):
        with pytest.raises(ConflictError):
            catalog.update(
                multiple_books[0].isbn,
                BookUpdate.model_validate({"location": "E-G06"}),
            )

    def test_update_isbn_taken_by_other_book(self, catalog, multiple_books):
        with pytest.raises(ConflictError):
            catalog.update(
                multiple_books[0].isbn,
                BookUpdate.model_validate({"isbn": str(multiple_books[1].isbn)}),
            )

    def test_update_missing_book(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.update("123", BookUpdate())

    def test_update_blank_title_rejected(self, catalog, sample_book):
        fields = BookUpdate.model_construct(title="   ", _fields_set={"title"})
        with pytest.raises(InvalidArgumentError):
            catalog.update(sample_book.isbn, fields)

    def test_update_isbn_moves_cover(self, catalog, cover_store, sample_book):
        cover_store.save("9780307474728.jpg", JPEG)

        catalog.update(sample_book.isbn, BookUpdate.model_validate({"isbn": "9780307474729"}))

        assert cover_store.find(9780307474728) == []
        assert cover_store.path_for("9780307474729.jpg").read_bytes() == JPEG

    def test_update_new_cover_written_under_new_isbn(self, catalog, cover_store, sample_book):
        cover_store.save("9780307474728.jpg", b"old-cover")

        catalog.update(
            sample_book.isbn,
            BookUpdate.model_validate({"isbn": "111"}),
            CoverUpload(filename="nueva.jpg", data=JPEG),
        )

        assert cover_store.path_for("111.jpg").read_bytes() == JPEG
        assert cover_store.find(9780307474728) == []

    def test_reused_isbn_does_not_inherit_old_cover(self, catalog, cover_store, sample_book):
        """A book added later under the previous ISBN starts without a cover."""
        cover_store.save("9780307474728.jpg", b"old-cover")
        catalog.update(
            sample_book.isbn,
            BookUpdate.model_validate({"isbn": "111"}),
            CoverUpload(filename="nueva.jpg", data=JPEG),
        )

        catalog.add(new_book(isbn="9780307474728"))

        assert cover_store.find(9780307474728) == []

    def test_update_location_conflict_at_commit(self, catalog, multiple_books, monkeypatch):
        """The unique constraint still rejects a location the pre-check missed."""
        monkeypatch.setattr(CatalogService, "_find_by_location", lambda self, location: None)

        with pytest.raises(ConflictError):
            catalog.update(
                multiple_books[0].isbn,
                BookUpdate.model_validate({"location": "E-G06"}),
            )

        assert isinstance(catalog.count(), int)


class TestDelete:
    """Tests for CatalogService.delete."""

    def test_delete_removes_row_and_cover(self, catalog, cover_store, sample_book):
        cover_store.save("9780307474728.jpg", JPEG)

        catalog.delete("9780307474728")

        assert catalog.count() == 0
        assert cover_store.find(9780307474728) == []

    def test_delete_without_cover(self, catalog, sample_book):
        catalog.delete(sample_book.isbn)
        assert catalog.count() == 0

    def test_delete_does_not_touch_other_prefixes(self, catalog, cover_store, sample_book):
        """Only '<isbn>.' matches: 97803074747281.jpg belongs to another book."""
        cover_store.save("97803074747281.jpg", JPEG)

        catalog.delete(sample_book.isbn)

        assert cover_store.path_for("97803074747281.jpg").exists()

    def test_delete_missing_book(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.delete("123")
