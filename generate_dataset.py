"""
Print the simulated analysis for a file name and optionally write the
signed device report, without starting the server.

    python generate_dataset.py traffic_capture.pcap --output reports/capture.csv
"""

import argparse
from pathlib import Path

from detection.config import get_app_config
from detection.formatting import format_percent
from detection.report import ReportSigner, export_report
from detection.roster import generate_roster, partition_roster
from detection.summary import generate_summary


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate the simulated botnet analysis for a file name")
    parser.add_argument("file_name", nargs="?", default="default.csv", help="Name of the uploaded file")
    parser.add_argument(
        "--output", "-o", type=Path,
        help="Write the CSV report here, plus a .sig file when REPORT_SIGNING_KEY is set",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    print("=" * 60)
    print("🌐 GENERATING IoT BOTNET ANALYSIS")
    print("=" * 60)

    summary = generate_summary(args.file_name)
    roster = generate_roster(args.file_name, summary.total_devices, summary.blocked_devices)
    blocked, clean = partition_roster(roster)

    print(f"\n📄 File: {args.file_name!r}")
    print(f"🎲 Scenario: {summary.scenario}")
    print(f"📊 Total Devices:   {summary.total_devices:,}")
    print(f"❌ Blocked Devices: {summary.blocked_devices:,}")
    print(f"✅ Clean Devices:   {summary.clean_devices:,}")
    print(f"🎯 Avg. Confidence: {format_percent(summary.avg_confidence)}")

    print("\n🔥 Threat levels:")
    for entry in summary.threat_breakdown:
        print(f"   {entry.label:<8} {entry.count}")

    print("\n📱 Device types:")
    for entry in summary.type_breakdown:
        print(f"   {entry.label:<12} {entry.count}")

    print(f"\n🗂️  Roster: {len(blocked)} blocked + {len(clean)} clean shown")

    if args.output:
        body = export_report(summary, roster)
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(body)
        print(f"💾 Report: {args.output}")

        config = get_app_config()
        if config.report_signing_key_configured:
            signature_path = args.output.with_name(args.output.name + ".sig")
            signature_path.write_text(ReportSigner(config.report_signing_key).sign(body) + "\n")
            print(f"🔏 Signature: {signature_path}")
        else:
            print("⚠️  REPORT_SIGNING_KEY not set - report written unsigned")

    print("\n" + "=" * 60)
    print("✅ ANALYSIS GENERATED")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
