"""Generator configuration"""

from dataclasses import dataclass, field

# Module names that cannot be used verbatim for a generated package.
DEFAULT_RESERVED_NAMES = {
    "interface": "interfaces",
    "map": "maps",
}


@dataclass
class GeneratorConfig:
    """Options shared by every package generated in one run"""
    reserved_names: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_RESERVED_NAMES))
    include_api_version: bool = True
    runtime_module: str = "binapigen.api"

    def package_name(self, module_name: str) -> str:
        """Name of the generated package for a schema module"""
        return self.reserved_names.get(module_name, module_name)
