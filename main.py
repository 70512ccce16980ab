import sys
import os
import argparse
import json
import logging
from pathlib import Path

from locforge_logger import get_logger, set_console_level
logger = get_logger("main")

if __file__:
    application_path = os.path.dirname(os.path.abspath(__file__))
    if application_path not in sys.path:
        sys.path.insert(0, application_path)
    logger.debug(f"Running from script. Added to sys.path: {application_path}")

import locforge_config as config
from locforge_exceptions import CatalogError, LocForgeError
from core.canonical_registry import CanonicalRegistry
from core.group_builder import build_similarity_groups
from core.key_resolver import KeyResolver
from core.language_data import TranslationCatalog
from core.similarity_checker import SimilarityThresholds
from models.settings_model import SettingsModel


def _read_keys(path):
    """Keys from a JSON list of strings or from a catalog's allKeys."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON: {e}", file_path=path) from e
    except OSError as e:
        raise CatalogError(f"Cannot read keys: {e}", file_path=path) from e

    if isinstance(data, dict):
        data = data.get("allKeys", [])
    if not isinstance(data, list) or not all(isinstance(k, str) for k in data):
        raise CatalogError("Expected a list of strings or a catalog with 'allKeys'", file_path=path)
    return data


def _thresholds_from_args(args):
    settings = SettingsModel.instance()
    return SimilarityThresholds(
        general=args.general if args.general is not None else settings.general_threshold,
        case_insensitive=args.case if args.case is not None else settings.case_insensitive_threshold,
        punctuation=args.punctuation if args.punctuation is not None else settings.punctuation_threshold,
    )


def cmd_detect(args):
    keys = _read_keys(args.keys_file)
    groups = build_similarity_groups(keys, _thresholds_from_args(args),
                                     source_info=args.source or args.keys_file, strict=args.strict)

    if args.json:
        print(json.dumps([
            {
                "texts": group.texts,
                "selected": group.selected_text,
                "reason": group.reason,
                "averageScore": round(group.average_score, 4),
                "groupKey": group.group_key,
            }
            for group in groups
        ], indent=2, ensure_ascii=False))
        return 0

    if not groups:
        print("No similar keys found.")
        return 0

    for number, group in enumerate(groups, 1):
        print(f"Group {number} ({group.average_score:.1%}): {group.reason}")
        for text in group.texts:
            marker = "*" if text == group.selected_text else " "
            print(f"  {marker} {text}")
    return 0


def cmd_translate(args):
    # Deferred: pulls in PySide6
    from controllers.language_controller import LanguageController

    settings = SettingsModel.instance()
    catalog = TranslationCatalog.load(args.catalog_file, default_language=settings.default_language)

    registry_path = args.registry
    if registry_path is None:
        registry_path = settings.registry_path
        Path(registry_path).parent.mkdir(parents=True, exist_ok=True)
    registry = CanonicalRegistry(registry_path)
    try:
        resolver = KeyResolver.from_settings(registry, catalog, settings)
        controller = LanguageController(resolver, languages_dir=args.languages_dir, settings=settings)

        # One-off lookups never change the saved language
        if args.language:
            controller.load_language_blocking(args.language, persist=False)
        else:
            controller.restore_language(blocking=True)

        print(resolver.translate(args.text))
    finally:
        registry.close()
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Near-duplicate key detection and canonical key resolution (LocForge).",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug output on the console."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Report groups of near-identical keys.")
    detect.add_argument("keys_file", help="JSON list of keys, or a catalog file.")
    detect.add_argument("--general", type=float, default=None, help="General similarity threshold.")
    detect.add_argument("--case", type=float, default=None, help="Case-insensitive threshold.")
    detect.add_argument("--punctuation", type=float, default=None, help="Punctuation threshold.")
    detect.add_argument("--source", default=None, help="Source info recorded on each group.")
    detect.add_argument("--strict", action="store_true", help="Fail on keys containing the group delimiter.")
    detect.add_argument("--json", action="store_true", help="Print groups as JSON.")
    detect.set_defaults(func=cmd_detect)

    translate = subparsers.add_parser("translate", help="Resolve display text for a key.")
    translate.add_argument("catalog_file", help="Catalog JSON (allKeys, supportedLanguages, ...).")
    translate.add_argument("text", help="Source text to resolve.")
    translate.add_argument("-l", "--language", default=None, help="Target language (saved language if omitted).")
    translate.add_argument("--registry", default=None, help="Registry database (settings path if omitted, ':memory:' for none).")
    translate.add_argument("--languages-dir", default=str(config.LANGUAGES_DIR),
                           help="Directory holding LanguageData_<name>.json files.")
    translate.set_defaults(func=cmd_translate)

    args = parser.parse_args(argv)

    if args.verbose:
        set_console_level(logging.DEBUG)

    try:
        return args.func(args)
    except LocForgeError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
