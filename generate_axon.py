#!/usr/bin/env python
"""
Generate an axonometric DXF drawing from a floor-plan topology record.

Usage:
    python generate_axon.py plan.json output.dxf
    python generate_axon.py plan.json  # outputs to plan.dxf

Example:
    python generate_axon.py samples/apartment.json samples/apartment_axon.dxf
"""

import sys
from pathlib import Path
from loguru import logger
from axonplan.core.config import get_default_config
from axonplan.core.models import FloorPlan
from axonplan.topology.records import load_record
from axonplan.topology.validator import validate_floor_plan
from axonplan.topology.repairer import repair_floor_plan_with_report
from axonplan.pipeline import WallPipeline
from axonplan.export.dxf_writer import write_axon_dxf


def main():
    # Parse command line arguments
    if len(sys.argv) < 2:
        print("Usage: python generate_axon.py plan.json [output.dxf]")
        print()
        print("Examples:")
        print("  python generate_axon.py samples/apartment.json")
        print("  python generate_axon.py samples/apartment.json samples/output.dxf")
        sys.exit(1)

    record_file = sys.argv[1]

    if len(sys.argv) >= 3:
        output_file = sys.argv[2]
    else:
        output_file = str(Path(record_file).with_suffix('.dxf'))

    if not Path(record_file).exists():
        print(f"Error: Input file not found: {record_file}")
        sys.exit(1)

    print("=" * 60)
    print("axonplan - Floor Plan to Axonometric DXF")
    print("=" * 60)
    print(f"Input:  {record_file}")
    print(f"Output: {output_file}")
    print()

    try:
        config = get_default_config()
        settings = config.topology_settings()

        # Step 1: Load record
        print("[1/5] Loading floor-plan record...")
        record = load_record(record_file)
        print(f"      [OK] Walls: {len(record.get('walls') or [])}")
        print(f"      [OK] Rooms: {len(record.get('rooms') or [])}")
        print(f"      [OK] Openings: {len(record.get('openings') or [])}")
        print()

        # Step 2: Validate
        print("[2/5] Validating topology...")
        validation = validate_floor_plan(record, settings)
        if validation.valid:
            print("      [OK] Record is valid")
        else:
            print(f"      [!] {len(validation.errors)} error(s)")
            for message in validation.messages()[:5]:
                print(f"          - {message}")
        if validation.warnings:
            print(f"      [!] {len(validation.warnings)} warning(s)")
        print()

        # Step 3: Repair
        print("[3/5] Repairing topology...")
        repaired, report = repair_floor_plan_with_report(record, settings)
        plan = FloorPlan.from_record(repaired)
        print(f"      [OK] {plan}")
        print(f"      [OK] Dropped: {len(report.dropped)}, defaulted: {len(report.defaulted)}")
        print()

        # Step 4: Build geometry
        print("[4/5] Extruding and projecting walls...")
        unit_scale = config.get_geometry_default("record_units_to_mm", 1000.0)
        result = WallPipeline(config).run(plan.walls, unit_scale=unit_scale)
        print(f"      [OK] Visible faces: {len(result.faces)}")
        if result.skipped:
            print(f"      [!] Skipped walls: {', '.join(result.skipped)}")
        print()

        # Step 5: Write DXF
        print("[5/5] Writing DXF file...")
        written = write_axon_dxf(result.faces, output_file, config=config)
        print(f"      [OK] Wrote DXF file")
        print()

        # Summary
        print("=" * 60)
        print("SUCCESS!")
        print("=" * 60)
        print(f"Generated: {written}")
        print()
        print("Summary:")
        print(f"  - {len(plan.walls)} walls")
        print(f"  - {len(plan.rooms)} rooms")
        print(f"  - {len(result.faces)} faces")
        print()

        file_size = written.stat().st_size / 1024
        print(f"File size: {file_size:.1f} KB")

    except Exception as e:
        logger.error(f"Failed to process {record_file}: {e}")
        print()
        print("=" * 60)
        print("ERROR!")
        print("=" * 60)
        print(f"Failed to process record: {e}")
        print()
        print("Common issues:")
        print("  - Not a JSON object -> Check the record file contents")
        print("  - File not found -> Check file path is correct")
        print()
        sys.exit(1)


if __name__ == "__main__":
    main()
