from __future__ import annotations

import argparse
import datetime as dt
import json
from typing import Any, Dict, Optional

from .articles import load_article, tabulate_articles
from .authors import corr_author, corr_authors
from .reviewers import reviewer_summary
from .roster import load_roster
from .workload import add_ae, ae_workload, get_ae


def _articles(args: argparse.Namespace):
    return tabulate_articles(root=args.root)


def run_reviewers(args: argparse.Namespace) -> Any:
    return reviewer_summary(_articles(args), push=args.push)


def run_workload(args: argparse.Namespace) -> Any:
    return ae_workload(_articles(args), day_back=args.day_back, roster=load_roster(args.roster))


def run_add_ae(args: argparse.Namespace) -> Dict[str, Any]:
    date = dt.date.fromisoformat(args.date) if args.date else None
    article = add_ae(load_article(args.article, root=args.root), args.name, date=date, roster=load_roster(args.roster))
    return get_ae(article)


def run_corr_author(args: argparse.Namespace) -> Any:
    if args.article:
        return corr_author(load_article(args.article, root=args.root))
    return corr_authors(tabulate_articles(folders=["Submissions"], root=args.root))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Editorial operations over the journal's article folders")
    p.add_argument("--root", default=None, help="Journal root holding Submissions/ and Accepted/")
    p.add_argument("--roster", default=None, help="AE roster CSV override")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_rev = sub.add_parser("reviewers", help="Reviewer agree/decline summary")
    p_rev.add_argument("--push", action="store_true", help="Write agreed counts to the reviewer sheet")
    p_rev.set_defaults(func=run_reviewers)

    p_work = sub.add_parser("workload", help="Articles currently with each AE")
    p_work.add_argument("--day-back", type=int, default=None)
    p_work.set_defaults(func=run_workload)

    p_add = sub.add_parser("add-ae", help="Assign an AE to an article")
    p_add.add_argument("article", help='Article id relative to the root, e.g. "Submissions/2020-114"')
    p_add.add_argument("name", help="Whole or part of the AE initials, name, github handle or email")
    p_add.add_argument("--date", default=None, help="Status date (YYYY-MM-DD), defaults to today")
    p_add.set_defaults(func=run_add_ae)

    p_corr = sub.add_parser("corr-author", help="Corresponding author of one or all active articles")
    p_corr.add_argument("article", nargs="?", default=None)
    p_corr.set_defaults(func=run_corr_author)
    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    out = args.func(args)
    print(json.dumps(out, ensure_ascii=False, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
