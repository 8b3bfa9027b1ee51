"""Script to write a large demo metrics log for resolution testing."""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from tgraph.services.demo import write_demo_file


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate demo metric data")
    parser.add_argument("--file", default="large-demo-metrics.log", help="Output log file")
    parser.add_argument("--count", type=int, default=1200, help="Number of data points")
    parser.add_argument("--seed", type=int, help="Random seed")
    args = parser.parse_args()

    count = write_demo_file(args.file, args.count, seed=args.seed)
    print(f"Generated {count} data points in {args.file}")
    print("\nTry resolution control in the browser:")
    print(f"  tgraph web --file {args.file} --metric cpuPercent --accumulate")
    print("\nOr the terminal view:")
    print(f"  tgraph view --file {args.file} --accumulate --style lean")


if __name__ == "__main__":
    main()
