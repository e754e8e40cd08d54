"""
Extract alternate function modes on MCU pins from the STM32CubeMX database.

Usage: cube-parse -d <db_dir> <pin_mappings|features> <mcu_family>
"""

import argparse
import sys
from .assistant import Assistant
from .hal.builder import GENERATE_TARGETS
from .hal.errors import InvalidFilterError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cube-parse",
        description="Extract AF modes on MCU pins from the database files provided with STM32CubeMX")
    parser.add_argument('-d', '--db-dir', dest='db_dir', required=True,
                        help='Path to the CubeMX MCU database directory')
    parser.add_argument('generate', choices=GENERATE_TARGETS,
                        help='What to generate')
    parser.add_argument('mcu_family',
                        help='The MCU family to extract, e.g. "STM32L0"')
    parser.add_argument('-c', '--config', dest='config_file_path',
                        help='YAML or JSON file with a generator_config section')
    parser.add_argument('-o', '--output', dest='output_path',
                        help='Write the generated text to this file instead of stdout')
    parser.add_argument('--stems', nargs='+',
                        help='Only render the given peripheral stems, e.g. USART I2C')
    parser.add_argument('--line-width', dest='line_width', type=int,
                        help='Column budget for wrapped name lists')
    parser.add_argument('--dump-tree', dest='dump_tree', action='store_true',
                        help='Also write aggregation_tree.yaml next to the output')
    parser.add_argument('--log-level', dest='log_level', default='warning',
                        help='Logging level (debug, info, warning, error)')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    assistant = Assistant("cube_parse")
    assistant.set_log_level(args.log_level)

    try:
        ok = assistant.run(action="generate", **vars(args))
    except (InvalidFilterError, RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
