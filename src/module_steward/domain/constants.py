"""
Steward Command: Visual Telemetry Constants and structural defaults
"""

# STEWARD: ANSI Cyan (\033[36m)
_CYAN: str = "\033[36m"
_RESET: str = "\033[0m"
_STEWARD_ART: str = r"""
   _____ _______ ________          __     _____  _____
  / ____|__   __|  ____\ \        / /\   |  __ \|  __ \
 | (___    | |  | |__   \ \  /\  / /  \  | |__) | |  | |
  \___ \   | |  |  __|   \ \/  \/ / /\ \ |  _  /| |  | |   Module Hierarchy Remediation
  ____) |  | |  | |____   \  /\  / ____ \| | \ \| |__| |
 |_____/   |_|  |______|   \/  \/_/    \_\_|  \_\_____/
"""
STEWARD_BANNER = _CYAN + _STEWARD_ART + _RESET

DESCRIPTOR_NAME: str = "pom.xml"
DEFAULT_RELATIVE_PATH: str = "../pom.xml"

AGGREGATOR_SUFFIX: str = "-aggregator"
PARENT_SUFFIX: str = "-parent"
COMMON_SUFFIX: str = "-common"

DEFAULT_LEAF_SUFFIXES: tuple[str, ...] = (
    "-api",
    "-core",
    "-spi",
    "-facade",
    "-common",
    "-commons",
    "-util",
    "-utils",
)

DEFAULT_STAGING_DIR: str = ".remediation/staging"
DEFAULT_REPORT_DIR: str = ".remediation/reports"
BACKUP_SUFFIX: str = ".bak"

DEFAULT_VERIFY_COMMAND: tuple[str, ...] = ("mvn", "-q", "validate")
DEFAULT_VERIFY_TIMEOUT: int = 300

# Structural rules re-derived by the hierarchy validator
RULE_PURE_AGGREGATOR_LEAF_CHILD: str = "H201"
RULE_PARENT_AGGREGATOR_NON_LEAF_CHILD: str = "H202"
RULE_LEAF_HAS_CHILDREN: str = "H203"
RULE_MISSING_CHILD_DESCRIPTOR: str = "H204"

# Convention rules with automated fixers
RULE_PURE_AGGREGATOR_SUFFIX: str = "H101"
RULE_PARENT_AGGREGATOR_SUFFIX: str = "H102"
RULE_PURE_AGGREGATOR_DEPENDENCY_MANAGEMENT: str = "H103"
RULE_PARENT_MISSING_DEPENDENCY_MANAGEMENT: str = "H104"
RULE_PURE_AGGREGATOR_DIRECT_DEPENDENCIES: str = "H105"
RULE_UNLISTED_SUBMODULES: str = "H106"
RULE_CUSTOM_RELATIVE_PATH: str = "H107"
RULE_COMMON_MODULE_ORDER: str = "H108"
RULE_DUPLICATE_LAYER: str = "H109"

CATEGORY_HIERARCHY: str = "hierarchy"
CATEGORY_NAMING: str = "naming"
CATEGORY_DEPENDENCY_MANAGEMENT: str = "dependency-management"
CATEGORY_MODULE_LISTING: str = "module-listing"
CATEGORY_PARENT_INHERITANCE: str = "parent-inheritance"
