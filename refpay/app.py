import argparse
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

from pipelines.identity_resolution import MappingCache, confirm_match, confirm_results, match_all
from pipelines.payroll import build_batch_record, compute_batch, verify_totals
from pipelines.payroll.rates import suggest_rates
from storage.repositories import BatchRepository, MappingRepository, RefereeRepository, SettingsRepository

from . import __version__
from .cleanup import clear_month
from .database import get_session, init_database
from .env import db_path, load_env, log_dir, log_level
from .errors import NotFoundError, RefpayError
from .logger import get_logger
from .models import MatchResult, RefereeRecord, RefereeSettings
from .normalize import normalize_category_label
from .reports import monthly_summaries, referee_monthly_summaries
from .registry import get_referee
from .settings import get_referee_settings, initialize_default_settings
from .storage import load_amounts, load_rates, load_tally

logger = get_logger()


@contextmanager
def open_session(args: argparse.Namespace):
    path = Path(args.db)
    init_database(path)
    session = get_session(path)
    try:
        yield session
    finally:
        session.close()


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _print_match(result: MatchResult) -> None:
    if result.matched_referee is None:
        print(f"[manual] {result.schedule_name} -> (no referees in registry)")
        return
    flag = "stored" if result.is_from_storage else ("review" if result.needs_review else "ok")
    print(f"[{flag}] {result.schedule_name} -> {result.matched_referee.display_name} ({result.confidence}%)")
    if result.needs_review:
        for suggestion in result.suggestions[1:]:
            print(f"    alt: {suggestion.referee.display_name} ({suggestion.confidence}%)")


def cmd_init_db(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        referees = RefereeRepository(session).snapshot()
        settings_repo = SettingsRepository(session)
        _, created = initialize_default_settings(referees, settings_repo.referee_settings())
        settings_repo.save_referees(created)
    print(f"Database ready: {args.db} ({len(referees)} referees, {len(created)} new settings)")


def cmd_referees_list(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        referees = RefereeRepository(session).snapshot()
    if not referees:
        print("No referees in registry.")
        return
    for referee in referees:
        print(f"{referee.employee_number:>8}  {referee.full_name}")
    print(f"\n{len(referees)} referees")


def cmd_referees_add(args: argparse.Namespace) -> None:
    referee = RefereeRecord(employee_number=args.employee_number.strip(), full_name=args.full_name.strip())
    with open_session(args) as session:
        RefereeRepository(session).add(referee)
    print(f"Added: {referee.display_name}")


def cmd_referees_update(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        repo = RefereeRepository(session)
        current = repo.get(args.employee_number)
        if current is None:
            raise NotFoundError(args.employee_number)
        updated = RefereeRecord(
            employee_number=(args.new_employee_number or current.employee_number).strip(),
            full_name=(args.full_name or current.full_name).strip(),
        )
        repo.update(args.employee_number, updated)
    print(f"Updated: {updated.display_name}")


def cmd_referees_delete(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        removed = RefereeRepository(session).delete(args.employee_number)
    print(f"Deleted: {removed.display_name}")


def cmd_match(args: argparse.Namespace) -> None:
    entries, date_range, _ = load_tally(Path(args.input))
    with open_session(args) as session:
        registry = RefereeRepository(session).snapshot()
        mapping_repo = MappingRepository(session)
        cache = MappingCache(mapping_repo.all())
        matched, unmatched = match_all([e.name for e in entries], registry, cache)
        for result in matched + unmatched:
            _print_match(result)
        if args.accept:
            saved = mapping_repo.save(confirm_results(matched, cache, date_processed=date_range[0]))
            print(f"\nStored {saved} confirmed mappings.")
    review = sum(1 for r in matched if r.needs_review)
    print(f"\n{len(matched)} matched, {review} need review, {len(unmatched)} need manual selection")


def cmd_confirm(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        registry = RefereeRepository(session).snapshot()
        referee = get_referee(registry, args.employee_number)
        if referee is None:
            raise NotFoundError(args.employee_number)
        mapping_repo = MappingRepository(session)
        cache = MappingCache(mapping_repo.all())
        result = MatchResult(schedule_name=args.schedule_name, matched_referee=None, confidence=0)
        mapping = confirm_match(result, cache, referee=referee, date_processed=args.date or "")
        mapping_repo.save([mapping])
    print(f"Confirmed: {args.schedule_name} -> {referee.display_name}")


def cmd_rates_list(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        rates = SettingsRepository(session).rates()
    if not rates:
        print("No category rates configured.")
        return
    for category, rate in rates.items():
        print(f"{category:>12}  {_money(rate)}")


def cmd_rates_set(args: argparse.Namespace) -> None:
    rates = load_rates(Path(args.input)) if args.input else {}
    for pair in args.rate or []:
        category, _, value = pair.partition("=")
        rates[normalize_category_label(category)] = float(value)
    with open_session(args) as session:
        changed = SettingsRepository(session).save_rates(rates)
    print(f"Saved {len(rates)} rates ({len(changed)} changed)")


def cmd_settings_global(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        repo = SettingsRepository(session)
        current = repo.get_global()
        updated = replace(
            current,
            hacienda_tax_rate=current.hacienda_tax_rate if args.tax_rate is None else args.tax_rate,
            deposit_fee=current.deposit_fee if args.deposit_fee is None else args.deposit_fee,
        )
        changed = repo.save_global(updated)
    print(f"Tax rate: {updated.hacienda_tax_rate:.2%}  Deposit fee: {_money(updated.deposit_fee)}  "
          f"Admin fee/game: {_money(updated.admin_fee_per_game)}")
    for name, change in changed.items():
        print(f"  {name}: {change['old']} -> {change['new']}")


def cmd_settings_referee(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        repo = SettingsRepository(session)
        current = get_referee_settings(repo.referee_settings(), args.employee_number)
        updated = RefereeSettings(
            employee_number=args.employee_number,
            has_fixed_rate=current.has_fixed_rate if args.fixed_rate is None else args.fixed_rate > 0,
            fixed_rate=current.fixed_rate if args.fixed_rate is None else args.fixed_rate,
            has_admin_fee=current.has_admin_fee if args.admin_fee is None else args.admin_fee,
        )
        repo.save_referee(updated)
    rate = _money(updated.fixed_rate) if updated.has_fixed_rate else "category rates"
    print(f"{args.employee_number}: rate={rate} admin_fee={'on' if updated.has_admin_fee else 'off'}")


def cmd_payroll(args: argparse.Namespace) -> None:
    entries, date_range, files = load_tally(Path(args.input))
    extra_pay = load_amounts(Path(args.extra), "Extra pay") if args.extra else {}
    fines = load_amounts(Path(args.fines), "Fines") if args.fines else {}

    with open_session(args) as session:
        registry = RefereeRepository(session).snapshot()
        mapping_repo = MappingRepository(session)
        settings_repo = SettingsRepository(session)
        batch_repo = BatchRepository(session)

        cache = MappingCache(mapping_repo.all())
        matched, unmatched = match_all([e.name for e in entries], registry, cache)
        resolved = {r.schedule_name: r.matched_referee for r in matched}
        assignments = [(entry, resolved.get(entry.name)) for entry in entries]

        categories = {c for entry in entries for c in entry.categories}
        rates = suggest_rates(categories)
        rates.update(settings_repo.rates())
        if args.rates:
            rates.update(load_rates(Path(args.rates)))

        records = compute_batch(
            assignments,
            rates=rates,
            global_settings=settings_repo.get_global(),
            referee_settings=settings_repo.referee_settings(),
            lifetime_before=batch_repo.lifetime_earnings(exclude_batch_id=args.batch_id),
            extra_pay=extra_pay,
            fines=fines,
        )
        batch = build_batch_record(records, date_range, batch_id=args.batch_id, name=args.name, files=files)

        print(f"{'Employee':>8}  {'Referee':<32} {'Games':>5} {'Gross':>10} {'Tax':>9} {'Net':>10}")
        for line in batch.referees:
            print(f"{line.employee_number:>8}  {line.referee_name[:32]:<32} {line.games:>5} "
                  f"{_money(line.gross_pay):>10} {_money(line.hacienda_tax):>9} {_money(line.net_pay):>10}")
        totals = batch.totals
        print(f"\nGames: {totals.total_games}  Gross: {_money(totals.gross_pay)}  Extra: {_money(totals.total_extra_pay)}  "
              f"Admin: {_money(totals.total_admin_fees)}  Tax: {_money(totals.total_tax)}  "
              f"Deposit: {_money(totals.total_deposit)}  Fines: {_money(totals.total_fines)}  Net: {_money(totals.net_pay)}")

        review = [r for r in matched if r.needs_review]
        if review or unmatched:
            print(f"\n{len(review)} low-confidence matches, {len(unmatched)} unresolved names; run 'match' to review.")

        if args.save:
            mismatched = verify_totals(batch)
            if mismatched:
                logger.error("Batch totals do not match referee lines", batch_id=batch.id, fields=mismatched)
                raise SystemExit(f"Refusing to save: totals mismatch in {', '.join(mismatched)}")
            mapping_repo.save(confirm_results(matched, cache, date_processed=date_range[0]))
            batch_repo.save(batch)
            print(f"\nSaved batch {batch.id}")

    logger.log_metrics_summary()


def cmd_history_list(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        history = BatchRepository(session).history()
    if not history:
        print("No saved payroll batches.")
        return
    for batch in history:
        label = batch.name or f"{batch.date_range[0]} - {batch.date_range[1]}"
        print(f"{batch.id}  {label:<30} referees={len(batch.referees):>3} net={_money(batch.totals.net_pay)}")


def cmd_history_rename(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        BatchRepository(session).rename(args.batch_id, args.name)
    print(f"Renamed {args.batch_id} -> {args.name}")


def cmd_history_delete(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        BatchRepository(session).delete(args.batch_id)
    print(f"Deleted {args.batch_id}")


def cmd_history_clear_month(args: argparse.Namespace) -> None:
    before, after = clear_month(Path(args.db), args.month)
    print(f"Removed {before - after} batches from {args.month} ({after} remaining)")


def cmd_summary(args: argparse.Namespace) -> None:
    with open_session(args) as session:
        history = BatchRepository(session).history()
    if args.by_referee:
        for summary in referee_monthly_summaries(history):
            t = summary.totals
            print(f"{summary.employee_number:>8}  {summary.referee_name:<32} games={t['games']:>4} "
                  f"gross={_money(t['gross_pay'])} net={_money(t['net_pay'])}")
        return
    for summary in monthly_summaries(history):
        print(f"{summary.month_label:<16} batches={len(summary.batches):>2} referees={summary.referee_count:>3} "
              f"games={summary.total_games:>4} gross={_money(summary.total_gross)} tax={_money(summary.total_tax)} "
              f"net={_money(summary.total_net)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="refpay", description="Referee identity resolution and payroll")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", default=str(db_path()), help="Path to SQLite database (default: REFPAY_DB_PATH or data/refpay.db)")

    subparsers = parser.add_subparsers(dest="command")

    init = subparsers.add_parser("init-db", help="Create tables and default referee settings")
    init.set_defaults(func=cmd_init_db)

    refs = subparsers.add_parser("referees", help="Manage the referee registry")
    refs_sub = refs.add_subparsers(dest="referees_command")
    lst = refs_sub.add_parser("list", help="List registry entries")
    lst.set_defaults(func=cmd_referees_list)
    add = refs_sub.add_parser("add", help="Add a referee")
    add.add_argument("employee_number")
    add.add_argument("full_name")
    add.set_defaults(func=cmd_referees_add)
    upd = refs_sub.add_parser("update", help="Rename a referee or change their employee number")
    upd.add_argument("employee_number")
    upd.add_argument("--full-name", help="New full name")
    upd.add_argument("--new-employee-number", help="New employee number")
    upd.set_defaults(func=cmd_referees_update)
    dele = refs_sub.add_parser("delete", help="Delete a referee")
    dele.add_argument("employee_number")
    dele.set_defaults(func=cmd_referees_delete)

    mat = subparsers.add_parser("match", help="Resolve schedule names in a tally against the registry")
    mat.add_argument("--input", required=True, help="Path to tally JSON")
    mat.add_argument("--accept", action="store_true", help="Store every automatic match as confirmed")
    mat.set_defaults(func=cmd_match)

    con = subparsers.add_parser("confirm", help="Manually link a schedule name to a referee")
    con.add_argument("schedule_name")
    con.add_argument("employee_number")
    con.add_argument("--date", help="Date processed (stored with the mapping)")
    con.set_defaults(func=cmd_confirm)

    rates = subparsers.add_parser("rates", help="Category rate table")
    rates_sub = rates.add_subparsers(dest="rates_command")
    rl = rates_sub.add_parser("list", help="Show configured rates")
    rl.set_defaults(func=cmd_rates_list)
    rs = rates_sub.add_parser("set", help="Set rates from a JSON file and/or CATEGORY=RATE pairs")
    rs.add_argument("--input", help="Path to rate table JSON")
    rs.add_argument("rate", nargs="*", help="CATEGORY=RATE")
    rs.set_defaults(func=cmd_rates_set)

    sett = subparsers.add_parser("settings", help="Payroll settings")
    sett_sub = sett.add_subparsers(dest="settings_command")
    glob = sett_sub.add_parser("global", help="Show or change global settings")
    glob.add_argument("--tax-rate", type=float, help="Hacienda tax rate as a fraction, e.g. 0.10")
    glob.add_argument("--deposit-fee", type=float, help="Flat deposit fee per referee per batch")
    glob.set_defaults(func=cmd_settings_global)
    ref = sett_sub.add_parser("referee", help="Show or change one referee's settings")
    ref.add_argument("employee_number")
    ref.add_argument("--fixed-rate", type=float, help="Fixed per-game rate (0 to use category rates)")
    ref.add_argument("--admin-fee", action=argparse.BooleanOptionalAction, default=None, help="Charge the per-game admin fee")
    ref.set_defaults(func=cmd_settings_referee)

    pay = subparsers.add_parser("payroll", help="Compute payroll for a tally")
    pay.add_argument("--input", required=True, help="Path to tally JSON")
    pay.add_argument("--rates", help="Rate table JSON overriding stored rates")
    pay.add_argument("--extra", help="JSON of employee number -> extra pay")
    pay.add_argument("--fines", help="JSON of employee number -> fines")
    pay.add_argument("--batch-id", help="Recompute (and replace on save) an existing batch")
    pay.add_argument("--name", help="Batch name")
    pay.add_argument("--save", action="store_true", help="Persist the batch and confirmed mappings")
    pay.set_defaults(func=cmd_payroll)

    hist = subparsers.add_parser("history", help="Saved payroll batches")
    hist_sub = hist.add_subparsers(dest="history_command")
    hl = hist_sub.add_parser("list", help="List saved batches")
    hl.set_defaults(func=cmd_history_list)
    hr = hist_sub.add_parser("rename", help="Rename a batch")
    hr.add_argument("batch_id")
    hr.add_argument("name")
    hr.set_defaults(func=cmd_history_rename)
    hd = hist_sub.add_parser("delete", help="Delete a batch")
    hd.add_argument("batch_id")
    hd.set_defaults(func=cmd_history_delete)
    hc = hist_sub.add_parser("clear-month", help="Delete every batch starting in a month")
    hc.add_argument("month", help="YYYY-MM")
    hc.set_defaults(func=cmd_history_clear_month)

    summ = subparsers.add_parser("summary", help="Monthly payroll summaries")
    summ.add_argument("--by-referee", action="store_true", help="Summarize per referee instead of per month")
    summ.set_defaults(func=cmd_summary)

    return parser


def main(argv=None):
    # Load .env if present (REFPAY_DB_PATH, REFPAY_LOG_LEVEL, REFPAY_LOG_DIR)
    load_env()
    logger.configure(log_level(), log_dir())
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except RefpayError as e:
            logger.record_error(type(e).__name__)
            raise SystemExit(str(e))
        return

    parser.print_help()


if __name__ == "__main__":
    main()
