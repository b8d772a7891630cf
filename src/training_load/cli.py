#!/usr/bin/env python3
"""
Training Load CLI.

Training stress, fitness/fatigue/form, zones and composite scores.

Usage:
    training-load athlete alice --ftp 250 --lthr 165
    training-load add-session alice --date 2024-03-01 --sport BIKE --duration 3600 --np 220
    training-load zones --ftp 250 --lthr 165
    training-load tss --sport RUN --duration 3600 --distance 12000 --threshold-pace 4.0
    training-load pmc alice --days 14
    training-load tri-score alice
    training-load efficiency alice --sport BIKE
    training-load taper alice 2024-05-12
    training-load week alice
    training-load css --t400 360 --t200 165
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from .config import get_settings
from .db.database import TrainingDatabase
from .exceptions import TrainingLoadError
from .metrics.fitness import determine_form
from .metrics.zones import compute_zones
from .models.athlete import AthleteThresholds, Session, Sport
from .services.analytics import AnalyticsService


# ANSI color codes
class Colors:
    RED = "\033[91m"
    YELLOW = "\033[93m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def format_tsb(tsb: float) -> str:
    """Format TSB with color."""
    form = determine_form(tsb)
    color = {
        "fresh": Colors.GREEN,
        "positive": Colors.GREEN,
        "neutral": Colors.YELLOW,
        "fatigued": Colors.YELLOW,
        "very_fatigued": Colors.RED,
    }[form]
    status = form.replace("_", " ").title()
    return f"{color}{tsb:+.1f} ({status}){Colors.RESET}"


def format_trend(direction: str, percent: float) -> str:
    """Format a trend direction with color."""
    color = {
        "improving": Colors.GREEN,
        "declining": Colors.RED,
    }.get(direction, Colors.YELLOW)
    return f"{color}{direction} ({percent:+.1f}%){Colors.RESET}"


def _header(title: str) -> None:
    print()
    print(f"{Colors.BOLD}Training Load - {title}{Colors.RESET}")
    print("=" * 40)
    print()


def _thresholds_from_args(args) -> AthleteThresholds:
    return AthleteThresholds(
        ftp=args.ftp,
        lthr=args.lthr,
        threshold_pace=args.threshold_pace,
        css=args.css,
        max_hr=args.max_hr,
        resting_hr=args.resting_hr,
    )


def cmd_athlete(args, service: AnalyticsService):
    """Create or update an athlete's thresholds."""
    _header("Athlete")
    thresholds = service.update_thresholds(args.athlete_id, _thresholds_from_args(args), name=args.name)
    print(f"Saved thresholds for {args.athlete_id}:")
    for key, value in thresholds.to_dict().items():
        if value is not None:
            print(f"  {key}: {value}")
    print()


def cmd_add_session(args, service: AnalyticsService):
    """Record a session and show its TSS."""
    session = Session(
        date=args.date,
        sport=args.sport,
        duration_seconds=args.duration,
        avg_heart_rate=args.hr,
        avg_power=args.power,
        normalized_power=args.np,
        avg_speed=args.speed,
        distance=args.distance,
        athlete_id=args.athlete_id,
        name=args.name,
    )
    stored = service.record_session(session)
    print(
        f"Recorded {stored.sport.value} session {stored.id} on {stored.date.isoformat()}: "
        f"{Colors.BOLD}{stored.tss:.1f} TSS{Colors.RESET} ({stored.tss_method})"
    )


def cmd_zones(args, service: AnalyticsService):
    """Show training zones from thresholds or a stored athlete."""
    _header("Zones")
    if args.athlete_id:
        tables = service.get_athlete_zones(args.athlete_id)
    else:
        tables = compute_zones(_thresholds_from_args(args))

    labels = {
        "hr": "Heart Rate (bpm)",
        "hr_reserve": "Heart Rate Reserve (bpm)",
        "power": "Power (W)",
        "pace": "Run Pace (m/s)",
        "swim": "Swim (m/s)",
    }
    shown = False
    for domain, zones in tables.items():
        if zones is None:
            continue
        shown = True
        print(f"{Colors.CYAN}{labels[domain]}{Colors.RESET}")
        for zone in zones:
            upper = f"{zone.max:g}" if zone.max is not None else "+"
            print(f"  Zone {zone.zone} {zone.name:<16} {zone.min:g}-{upper}  {zone.description}")
        print()
    if not shown:
        print(f"{Colors.YELLOW}No thresholds set.{Colors.RESET}")
        print("Pass --ftp, --lthr, --threshold-pace, --css or --max-hr with --resting-hr.")
        print()


def cmd_tss(args, service: AnalyticsService):
    """Compute TSS for a single session without storing it."""
    session = Session(
        date=date.today(),
        sport=args.sport,
        duration_seconds=args.duration,
        avg_heart_rate=args.hr,
        avg_power=args.power,
        normalized_power=args.np,
        avg_speed=args.speed,
        distance=args.distance,
    )
    result = service.compute_session_tss(session, _thresholds_from_args(args))
    print(f"TSS:               {Colors.BOLD}{result.tss:.1f}{Colors.RESET}")
    print(f"Intensity factor:  {result.intensity_factor:.3f}")
    print(f"Method:            {result.method.value}")


def cmd_pmc(args, service: AnalyticsService):
    """Show the Performance Management Chart."""
    _header("Performance Management Chart")
    result = service.get_pmc(args.athlete_id, days=args.days, projection_days=args.projection)
    if result.current is None:
        print(f"{Colors.YELLOW}No sessions recorded for {args.athlete_id}.{Colors.RESET}")
        print()
        return

    print(f"{'Date':<12} {'TSS':>6} {'CTL':>6} {'ATL':>6} {'TSB':>7} {'Ramp':>6}")
    print("-" * 48)
    for point in result.history:
        ramp = f"{point.ramp_rate:+.1f}" if point.ramp_rate is not None else "-"
        print(
            f"{point.date.isoformat():<12} {point.tss:>6.1f} {point.ctl:>6.1f} "
            f"{point.atl:>6.1f} {point.tsb:>+7.1f} {ramp:>6}"
        )
    print()

    current = result.current
    print(f"{Colors.BOLD}Current{Colors.RESET}")
    print(f"  Fitness (CTL): {current.ctl:.1f}")
    print(f"  Fatigue (ATL): {current.atl:.1f}")
    print(f"  Form (TSB):    {format_tsb(current.tsb)}")

    if result.projections:
        last = result.projections[-1]
        print()
        print(f"{Colors.BOLD}Rest projection ({len(result.projections)} days){Colors.RESET}")
        print(f"  {last.date.isoformat()}: CTL {last.ctl:.1f}, ATL {last.atl:.1f}, TSB {format_tsb(last.tsb)}")
    print()


def cmd_taper(args, service: AnalyticsService):
    """Show a taper plan up to race day."""
    _header("Taper")
    plan = service.get_taper_plan(args.athlete_id, args.race_date, target_tsb=args.target_tsb)

    print(f"{'Date':<12} {'TSS':>6} {'CTL':>6} {'ATL':>6} {'TSB':>7}")
    print("-" * 42)
    for day in plan.days:
        print(
            f"{day.date.isoformat():<12} {day.tss:>6.0f} {day.ctl:>6.1f} "
            f"{day.atl:>6.1f} {day.tsb:>+7.1f}"
        )
    print()
    color = Colors.GREEN if plan.reaches_target else Colors.YELLOW
    print(
        f"Race day TSB: {color}{plan.race_day_tsb:+.1f}{Colors.RESET} "
        f"(target {plan.target_tsb:+.1f})"
    )
    print()


def cmd_week(args, service: AnalyticsService):
    """Show one week's training totals."""
    _header("Week Summary")
    summary = service.get_week_summary(args.athlete_id, args.week_start)
    print(f"{summary.week_start.isoformat()} to {summary.week_end.isoformat()}")
    print(f"  Sessions: {summary.activity_count}")
    print(f"  TSS:      {summary.total_tss:.0f}")
    print(f"  Hours:    {summary.total_duration_seconds / 3600:.1f}")
    print(f"  Distance: {summary.total_distance / 1000:.1f} km")
    print()
    for sport, totals in summary.by_sport.items():
        print(f"  {sport.value:<9} {totals.duration_seconds / 3600:>5.1f} h  {totals.tss:>5.0f} TSS")
    print()


def cmd_css(args, service: AnalyticsService):
    """Derive Critical Swim Speed from a 400m / 200m test."""
    result = service.compute_css(args.t400, args.t200)
    print(f"CSS:          {Colors.BOLD}{result.css:.3f} m/s{Colors.RESET}")
    print(f"Pace:         {result.pace_formatted} /100m")
    print(f"750m (est.):  {result.estimated_t750 // 60}:{result.estimated_t750 % 60:02d}")
    print(f"1500m (est.): {result.estimated_t1500 // 60}:{result.estimated_t1500 % 60:02d}")


def _print_tri_score_history(service: AnalyticsService, athlete_id: str, weeks: int) -> None:
    print(f"{'Week':<12} {'Overall':>8} {'Swim':>6} {'Bike':>6} {'Run':>6} {'Str':>6}")
    print("-" * 48)
    for week in service.get_tri_score_history(athlete_id, weeks=weeks):
        scores = " ".join(f"{week.sports[sport]:>6.0f}" for sport in Sport)
        print(f"{week.week_start.isoformat():<12} {week.overall:>8.0f} {scores}")
    print()


def cmd_tri_score(args, service: AnalyticsService):
    """Show the composite multi-sport score."""
    _header("Tri-Score")
    if args.history:
        _print_tri_score_history(service, args.athlete_id, args.history)
        return
    score = service.get_tri_score(args.athlete_id)
    print(f"Overall: {Colors.BOLD}{score.overall:.0f}{Colors.RESET} ({score.overall_trend:+.0f})")
    print()
    for sport, sport_score in score.sports.items():
        if not sport_score.trained:
            print(f"  {sport.value:<9} -")
            continue
        print(
            f"  {sport.value:<9} {sport_score.score:>5.1f} ({sport_score.trend:+.1f})  "
            f"{sport_score.weekly_hours:.1f} h, {sport_score.weekly_tss:.0f} TSS, "
            f"{sport_score.activity_count} sessions"
        )
    print()

    balance = score.balance
    color = Colors.GREEN if balance.balanced else Colors.YELLOW
    print(f"Balance: {color}{balance.balance_score:.0f}{Colors.RESET}")
    for recommendation in balance.recommendations:
        print(f"  - {recommendation}")
    print()
    print(f"Fitness level: {score.fitness.fitness_level} (CTL {score.fitness.ctl:.0f})")
    print()


def cmd_efficiency(args, service: AnalyticsService):
    """Show the Efficiency Factor trend."""
    _header("Efficiency Factor")
    trend = service.get_efficiency_trend(args.athlete_id, args.sport, days=args.days)
    if not trend.points:
        print(f"{Colors.YELLOW}No qualifying sessions (30+ min with heart rate).{Colors.RESET}")
        print()
        return

    for point in trend.points:
        print(f"  {point.date.isoformat()}  EF {point.ef:.3f}  {point.name or ''}")
    print()
    print(f"Average EF: {trend.average_ef:.3f}")
    print(f"Trend:      {format_trend(trend.trend_direction, trend.trend_percent)}")
    if trend.best_ef:
        print(f"Best EF:    {trend.best_ef.ef:.3f} on {trend.best_ef.date.isoformat()}")
    print()


def _add_threshold_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--ftp", type=float, help="Functional threshold power (W)")
    parser.add_argument("--lthr", type=float, help="Lactate threshold heart rate (bpm)")
    parser.add_argument("--threshold-pace", type=float, help="Threshold running speed (m/s)")
    parser.add_argument("--css", type=float, help="Critical swim speed (m/s)")
    parser.add_argument("--max-hr", type=float, help="Maximum heart rate (bpm)")
    parser.add_argument("--resting-hr", type=float, help="Resting heart rate (bpm)")


def _add_session_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--sport", required=True, help="SWIM, BIKE, RUN or STRENGTH")
    parser.add_argument("--duration", type=float, required=True, help="Duration in seconds")
    parser.add_argument("--hr", type=float, help="Average heart rate (bpm)")
    parser.add_argument("--power", type=float, help="Average power (W)")
    parser.add_argument("--np", type=float, help="Normalized power (W)")
    parser.add_argument("--speed", type=float, help="Average speed (m/s)")
    parser.add_argument("--distance", type=float, help="Distance (m)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="training-load",
        description="Training Load - TSS, fitness/fatigue/form, zones and scores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  training-load athlete alice --ftp 250 --lthr 165
  training-load zones --ftp 250
  training-load pmc alice --days 14
  training-load tri-score alice
        """,
    )
    parser.add_argument("--db", help="SQLite database path (default from settings)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Athlete command
    athlete_p = subparsers.add_parser("athlete", help="Create or update athlete thresholds")
    athlete_p.add_argument("athlete_id")
    athlete_p.add_argument("--name", help="Display name")
    _add_threshold_args(athlete_p)

    # Add-session command
    session_p = subparsers.add_parser("add-session", help="Record a completed session")
    session_p.add_argument("athlete_id")
    session_p.add_argument(
        "--date", type=date.fromisoformat, default=date.today(), help="Session date (YYYY-MM-DD)"
    )
    session_p.add_argument("--name", help="Session name")
    _add_session_args(session_p)

    # Zones command
    zones_p = subparsers.add_parser("zones", help="Show training zones")
    zones_p.add_argument("--athlete", dest="athlete_id", help="Use a stored athlete's thresholds")
    _add_threshold_args(zones_p)

    # TSS command
    tss_p = subparsers.add_parser("tss", help="Compute TSS for one session")
    _add_session_args(tss_p)
    _add_threshold_args(tss_p)

    # PMC command
    pmc_p = subparsers.add_parser("pmc", help="Show fitness, fatigue and form")
    pmc_p.add_argument("athlete_id")
    pmc_p.add_argument("--days", "-d", type=int, default=14, help="Days of history to show")
    pmc_p.add_argument("--projection", "-p", type=int, default=None, help="Days to project")

    # Tri-score command
    tri_p = subparsers.add_parser("tri-score", help="Show the composite multi-sport score")
    tri_p.add_argument("athlete_id")
    tri_p.add_argument("--history", type=int, metavar="WEEKS", help="Show weekly scores instead")

    # Taper command
    taper_p = subparsers.add_parser("taper", help="Plan a taper to race day")
    taper_p.add_argument("athlete_id")
    taper_p.add_argument("race_date", type=date.fromisoformat, help="Race day (YYYY-MM-DD)")
    taper_p.add_argument("--target-tsb", type=float, default=None, help="Race-day form to aim for")

    # Week command
    week_p = subparsers.add_parser("week", help="Show one week's training totals")
    week_p.add_argument("athlete_id")
    week_p.add_argument(
        "--week-start", type=date.fromisoformat, default=None, help="First day (default: this Monday)"
    )

    # CSS command
    css_p = subparsers.add_parser("css", help="Critical Swim Speed from a 400m / 200m test")
    css_p.add_argument("--t400", type=float, required=True, help="400m time in seconds")
    css_p.add_argument("--t200", type=float, required=True, help="200m time in seconds")

    # Efficiency command
    ef_p = subparsers.add_parser("efficiency", help="Show the Efficiency Factor trend")
    ef_p.add_argument("athlete_id")
    ef_p.add_argument("--sport", choices=["BIKE", "RUN"], default="BIKE")
    ef_p.add_argument("--days", "-d", type=int, default=None, help="Days to analyze")

    return parser


COMMANDS = {
    "athlete": cmd_athlete,
    "add-session": cmd_add_session,
    "zones": cmd_zones,
    "tss": cmd_tss,
    "pmc": cmd_pmc,
    "tri-score": cmd_tri_score,
    "taper": cmd_taper,
    "week": cmd_week,
    "css": cmd_css,
    "efficiency": cmd_efficiency,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_settings().log_level.upper(),
        format="%(levelname)s: %(message)s",
    )

    db = TrainingDatabase(args.db) if args.db else TrainingDatabase()
    service = AnalyticsService(db)

    try:
        COMMANDS[args.command](args, service)
    except TrainingLoadError as e:
        print(f"{Colors.RED}Error: {e.message}{Colors.RESET}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
