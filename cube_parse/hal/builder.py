from logging import Logger
from .generator_config import GeneratorOptions, load_generator_options
from .loader import CubeDatabaseLoader
from .builders import AggregationTree, group_tree, render_features, render_pin_traits
from .parsers import parse_gpio_version
from .utils import natural_sorted
from pathlib import Path
import yaml
from typing import Optional

GENERATE_TARGETS = ["pin_mappings", "features"]


class CubeParseBuilder:

    def __init__(self, logger: Logger, **kwargs):
        """
        Initializes the builder for one MCU family of a CubeMX database.
        """
        self.log = logger

        self.target: str = kwargs.get("generate")
        self.output_path: Optional[str] = kwargs.get("output_path")
        self.dump_tree: bool = bool(kwargs.get("dump_tree"))
        self.options: GeneratorOptions = load_generator_options(kwargs.get("config_file_path"), logger,
                                                                stems=kwargs.get("stems"),
                                                                line_width=kwargs.get("line_width"))

        if self.target not in GENERATE_TARGETS:
            raise ValueError(f"Unsupported generate target: {self.target}")

        self.loader = CubeDatabaseLoader(logger=logger,
                                         db_dir=kwargs.get("db_dir"),
                                         family=kwargs.get("mcu_family"))

        if not self.loader.load_all():
            raise RuntimeError("CubeDatabaseLoader failed to load the MCU database.")

        self.log.debug("CubeParseBuilder initialized",
                       extra={
                           "target": self.target,
                           "family": self.loader.family,
                           "db_dir": self.loader.db_dir,
                           "output_path": self.output_path,
                       })

    def aggregate(self) -> AggregationTree:
        """
        Inserts the signals of every GPIO revision into a fresh aggregation tree.
        Revisions are visited in natural order since the first insertion wins on conflicts.
        """
        tree = AggregationTree(self.log)
        for gpio_version in natural_sorted(self.loader.mcu_gpio_map):
            version = parse_gpio_version(gpio_version, self.log)
            if version is None:
                continue
            revision_group, revision = version

            gpio_config = self.loader.load_gpio_config(gpio_version)
            if gpio_config is None:
                raise RuntimeError(f"Could not load IP GPIO file for {gpio_version}")

            mcus = [mcu.ref_name for mcu in self.loader.mcu_gpio_map[gpio_version]]
            tree.insert_pins(gpio_config.pins, revision_group, revision, mcus)

        self.log.info("Aggregation tree built", extra={"stems": tree.stems(), "conflicts": tree.conflicts})
        return tree

    def render(self) -> str:
        if self.target == "features":
            return render_features(self.loader.mcu_gpio_map, self.options, self.log)

        tree = self.aggregate().select(self.options.stems)
        if self.dump_tree:
            self._dump_tree(tree)
        grouped = group_tree(tree, self.log, group_variants=self.options.group_variants)
        return render_pin_traits(grouped, self.options, self.log)

    def _dump_tree(self, tree: AggregationTree):
        parent = Path(self.output_path).parent if self.output_path else Path(".")
        with open(parent / "aggregation_tree.yaml", 'w') as file:
            yaml.dump({"aggregation_tree": tree.to_dict()}, file, default_flow_style=False, sort_keys=False)
        self.log.info("Wrote aggregation tree to %s", parent / "aggregation_tree.yaml")

    def build(self) -> bool:
        """Executes the generation process."""
        log: Logger = self.log
        log.info(f"Starting {self.target} generation for {self.loader.family}")

        try:
            content = self.render()
        except (OSError, RuntimeError) as e:
            log.error(f"Build failed: {str(e)}", exc_info=True)
            return False

        if self.output_path:
            with open(self.output_path, "w") as f:
                f.write(content)
            log.info("Wrote %s to %s", self.target, self.output_path)
        else:
            print(content, end="")

        log.info("Generation successful")
        return True
