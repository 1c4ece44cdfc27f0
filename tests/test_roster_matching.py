import datetime as dt
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from editorial_ops import roster as roster_mod
from editorial_ops.roster import load_roster, match_ae, resolve_initials
from editorial_ops.runtime_config import RUNTIME_CONFIG, PathsConfig, RuntimeConfig
from editorial_ops.workload import ae_workload

ROSTER = [
    {"name": "Dianne Cook", "initials": "DC", "email": "dicook@example.org", "github": "ae-articles-dc"},
    {"name": "Emi Tanaka", "initials": "ET", "email": "emi.tanaka@example.org", "github": "ae-articles-et"},
    {"name": "Rob Hyndman", "initials": "RH", "email": "rob@monash.example", "github": "ae-articles-rh"},
    {"name": "Robert Gentleman", "initials": "RG", "email": "rgentleman@example.org", "github": ""},
]


class MatchAeTests(unittest.TestCase):
    def test_initials_take_priority_over_another_entrys_name(self) -> None:
        roster = ROSTER + [{"name": "Etta Stone", "initials": "ES", "email": "", "github": ""}]
        # "et" is Emi Tanaka's initials and also part of "Etta", "Robert" and "Gentleman"
        self.assertEqual(match_ae(roster, "ET")["name"], "Emi Tanaka")

    def test_falls_back_through_name_github_and_email(self) -> None:
        self.assertEqual(match_ae(ROSTER, "Tanaka")["initials"], "ET")
        self.assertEqual(match_ae(ROSTER, "ae-articles-rh")["initials"], "RH")
        self.assertEqual(match_ae(ROSTER, "monash")["initials"], "RH")

    def test_match_is_case_insensitive(self) -> None:
        self.assertEqual(match_ae(ROSTER, "dianne")["initials"], "DC")

    def test_several_hits_in_one_field_pick_the_closest(self) -> None:
        self.assertEqual(match_ae(ROSTER, "Robert Gent")["initials"], "RG")
        self.assertEqual(match_ae(ROSTER, "Rob")["initials"], "RH")

    def test_no_match_and_empty_identifier_return_none(self) -> None:
        self.assertIsNone(match_ae(ROSTER, "zzz-nobody"))
        self.assertIsNone(match_ae(ROSTER, ""))
        self.assertIsNone(match_ae(ROSTER, "   "))


class LoadRosterTests(unittest.TestCase):
    def test_load_roster_strips_and_ignores_extra_columns(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "associate-editors.csv"
            path.write_text(
                "\ufeffname,initials,email,github,country\n"
                "Dianne Cook , DC,dicook@example.org,ae-articles-dc,AU\n"
                "Emi Tanaka,ET,emi@example.org,,AU\n",
                encoding="utf-8",
            )
            roster = load_roster(path)

        self.assertEqual(
            roster[0],
            {"name": "Dianne Cook", "initials": "DC", "email": "dicook@example.org", "github": "ae-articles-dc"},
        )
        self.assertEqual(roster[1]["github"], "")
        self.assertEqual(resolve_initials("ET", roster), "Emi Tanaka")
        self.assertIsNone(resolve_initials("ZZ", roster))

    def test_handle_column_spellings_feed_the_github_tier(self) -> None:
        for header in ("github", "github_handle", "handle"):
            with self.subTest(header=header):
                with tempfile.TemporaryDirectory() as tmp:
                    path = Path(tmp) / "associate-editors.csv"
                    path.write_text(
                        f"name,initials,email,{header}\n"
                        "Dianne Cook,DC,dicook@example.org,ae-articles-dc\n",
                        encoding="utf-8",
                    )
                    roster = load_roster(path)

                self.assertEqual(roster[0]["github"], "ae-articles-dc")
                self.assertEqual(match_ae(roster, "ae-articles-dc")["initials"], "DC")

    def test_roster_without_handle_column_has_blank_handles(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "associate-editors.csv"
            path.write_text("name,initials,email\nDianne Cook,DC,dicook@example.org\n", encoding="utf-8")
            roster = load_roster(path)

        self.assertEqual(roster[0]["github"], "")

    def test_roster_is_reread_on_every_call(self) -> None:
        status = [{"date": dt.date(2021, 1, 1), "status": "with AE", "comments": ""}]
        articles = [{"id": "2021-01", "ae": "XY", "status": status}]
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "associate-editors.csv"
            path.write_text("name,initials,email,github\nDianne Cook,DC,dc@example.org,\n", encoding="utf-8")
            cfg = RuntimeConfig(
                paths=PathsConfig(journal_root=tmp, roster_csv=str(path), folders=("Submissions",)),
                reviewer_sheet=RUNTIME_CONFIG.reviewer_sheet,
            )
            with patch.object(roster_mod, "RUNTIME_CONFIG", cfg):
                with self.assertLogs("editorial_ops.workload", level="WARNING"):
                    before = ae_workload(articles)
                with open(path, "a", encoding="utf-8") as fh:
                    fh.write("Xia Yu,XY,xy@example.org,\n")
                after = ae_workload(articles)

        self.assertEqual(before[0]["ae"], "XY")
        self.assertEqual(after, [{"ae": "Xia Yu", "n": 1, "initials": "XY", "email": "xy@example.org"}])


if __name__ == "__main__":
    unittest.main()
