import tempfile
import unittest
from pathlib import Path

from editorial_ops.authors import corr_author, corr_authors


class CorrAuthorTests(unittest.TestCase):
    def test_first_author_with_email_is_corresponding(self) -> None:
        art = {
            "id": "2021-01",
            "authors": [
                {"name": "First Author", "email": None},
                {"name": "Second Author", "email": "second@uni.edu"},
                {"name": "Third Author", "email": "third@uni.edu"},
            ],
        }
        self.assertEqual(corr_author(art), {"corr_author": "Second Author", "email": "second@uni.edu"})

    def test_blank_email_is_not_an_email(self) -> None:
        art = {"id": "2021-01", "authors": [{"name": "A", "email": "  "}, {"name": "B", "email": "b@x.org"}]}
        self.assertEqual(corr_author(art)["corr_author"], "B")

    def test_no_email_raises(self) -> None:
        art = {"id": "2021-07", "authors": [{"name": "A", "email": None}]}
        with self.assertRaisesRegex(ValueError, "2021-07"):
            corr_author(art)
        with self.assertRaises(ValueError):
            corr_author({"id": "2021-08", "authors": []})

    def test_batch_over_active_articles_on_disk(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for art_id, authors in (
                ("2021-01", "  Jane Doe <jane@uni.edu>\n"),
                ("2021-02", "  John Roe\n  Ana Lima <ana@uni.br>\n"),
            ):
                d = root / "Submissions" / art_id
                d.mkdir(parents=True)
                (d / "DESCRIPTION").write_text(f"ID: {art_id}\nAuthors:\n{authors}", encoding="utf-8")

            rows = corr_authors([root / "Submissions" / "2021-01", root / "Submissions" / "2021-02"])

        self.assertEqual(
            rows,
            [
                {"id": "2021-01", "corr_author": "Jane Doe", "email": "jane@uni.edu"},
                {"id": "2021-02", "corr_author": "Ana Lima", "email": "ana@uni.br"},
            ],
        )


if __name__ == "__main__":
    unittest.main()
