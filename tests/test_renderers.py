import logging
import unittest

from cube_parse.hal.builders import AggregationTree, group_tree, render_features, render_pin_traits
from cube_parse.hal.builders.render_pin_traits import combined_trait_name, role_trait_name
from cube_parse.hal.generator_config import GeneratorOptions
from cube_parse.hal.pin_signal import McuRecord, ParsedSignal, PinLocation

LOG = logging.getLogger("tests.renderers")

MCU_GPIO_MAP = {
    "STM32L051_gpio_v1_0": [
        McuRecord("STM32L051K(6-8)Tx", "STM32L051K8Tx", "LQFP32", "STM32L0x1"),
        McuRecord("STM32L051C(6-8)Tx", "STM32L051C6Tx", "LQFP48", "STM32L0x1"),
    ],
}


def _two_mcu_tree() -> AggregationTree:
    tree = AggregationTree(LOG)
    mcus = [m.ref_name for m in MCU_GPIO_MAP["STM32L051_gpio_v1_0"]]
    tree.insert(ParsedSignal("USART", "USART1", "7", "TX"), PinLocation("A", 9), "STM32L051", "v1_0", mcus)
    return tree


def _implementation_section(text: str) -> str:
    return text.split("// Pin implementations", 1)[1]


class TestRenderFeatures(unittest.TestCase):
    def test_one_io_feature_and_one_alias_per_mcu(self):
        text = render_features(MCU_GPIO_MAP, GeneratorOptions(), LOG)
        lines = text.splitlines()

        self.assertEqual([l for l in lines if l.startswith("io-")], ["io-STM32L051 = []"])
        self.assertEqual([l for l in lines if l.startswith("mcu-")], [
            'mcu-STM32L051C6Tx = ["io-STM32L051"]',
            'mcu-STM32L051K8Tx = ["io-STM32L051"]',
        ])
        self.assertLess(lines.index("io-STM32L051 = []"), lines.index('mcu-STM32L051C6Tx = ["io-STM32L051"]'))

    def test_family_and_package_features(self):
        options = GeneratorOptions(family_flags=True, package_flags=True)
        text = render_features(MCU_GPIO_MAP, options, LOG)

        self.assertIn("stm32l051 = []", text.splitlines())
        self.assertIn("package-LQFP32 = []", text.splitlines())
        self.assertIn('mcu-STM32L051K8Tx = ["io-STM32L051", "stm32l051", "package-LQFP32"]', text.splitlines())

    def test_malformed_entries_are_skipped(self):
        mcu_gpio_map = dict(MCU_GPIO_MAP)
        mcu_gpio_map["STM32F0_qqio_v1_0"] = [McuRecord("STM32F030C6Tx", "STM32F030C6Tx")]
        mcu_gpio_map["STM32F030_gpio_v1_0"] = [McuRecord("bogus", "bogus")]

        with self.assertLogs(LOG, level="WARNING") as cm:
            text = render_features(mcu_gpio_map, GeneratorOptions(), LOG)
        self.assertEqual(len(cm.records), 2)
        self.assertNotIn("STM32F030", text)

    def test_alias_lines_sort_numerically(self):
        mcu_gpio_map = {"STM32F0_gpio_v1_0": [
            McuRecord("STM32F030C8Tx", "STM32F030C8Tx"),
            McuRecord("STM32F030R8Tx", "STM32F030R8Tx"),
            McuRecord("STM32F030C6Tx", "STM32F030C6Tx"),
        ]}
        lines = [l for l in render_features(mcu_gpio_map, GeneratorOptions(), LOG).splitlines()
                 if l.startswith("mcu-")]
        self.assertEqual([l.split(" ")[0] for l in lines],
                         ["mcu-STM32F030C6Tx", "mcu-STM32F030C8Tx", "mcu-STM32F030R8Tx"])


class TestRenderPinTraits(unittest.TestCase):
    def test_shared_pin_gives_single_conditional_block(self):
        text = render_pin_traits(group_tree(_two_mcu_tree(), LOG), GeneratorOptions(), LOG)
        section = _implementation_section(text)

        self.assertEqual(section.count("cfg_if::cfg_if!"), 1)
        self.assertEqual(section.count("impl UsartTxPin<USART1> for PA9<Alternate<AF7>> {}"), 1)
        self.assertIn('feature = "mcu-STM32L051C6Tx"', section)
        self.assertIn('feature = "mcu-STM32L051K8Tx"', section)

    def test_declares_interfaces_and_imports(self):
        text = render_pin_traits(group_tree(_two_mcu_tree(), LOG), GeneratorOptions(), LOG)

        self.assertIn("pub trait UsartTxPin<PER> {}", text)
        self.assertIn("pub trait UsartPins<PER> {}", text)
        self.assertIn("for (TX,)", text)
        self.assertIn("TX: UsartTxPin<PER>,", text)
        self.assertIn("use crate::pac::{USART1};", text)
        self.assertIn("use crate::gpio::{AF7};", text)
        self.assertIn("use crate::gpio::{gpioa::PA9};", text)

    def test_combined_trait_only_names_roles_declared_for_its_mcus(self):
        tree = AggregationTree(LOG)
        tree.insert(ParsedSignal("USART", "USART1", "7", "TX"), PinLocation("A", 9), "STM32F401", "v1_0",
                    ["A", "B"])
        tree.insert(ParsedSignal("USART", "USART1", "7", "CTS"), PinLocation("A", 11), "STM32F401", "v1_0",
                    ["A"])
        text = render_pin_traits(group_tree(tree, LOG), GeneratorOptions(), LOG)
        section = text.split("// Combined pin interfaces", 1)[1].split("// Pin implementations", 1)[0]
        blocks = section.split("cfg_if::cfg_if!")[1:]

        self.assertEqual(len(blocks), 2)
        only_a = next(b for b in blocks if 'any(feature = "mcu-A"))' in b)
        only_b = next(b for b in blocks if 'any(feature = "mcu-B"))' in b)
        self.assertIn("for (CTS, TX)", only_a)
        self.assertIn("CTS: UsartCtsPin<PER>,", only_a)
        self.assertIn("for (TX,)", only_b)
        self.assertNotIn("UsartCtsPin", only_b)

        interfaces = text.split("// Pin interfaces", 1)[1].split("// Combined pin interfaces", 1)[0]
        cts_block = next(b for b in interfaces.split("cfg_if::cfg_if!")[1:] if "UsartCtsPin" in b)
        self.assertIn('any(feature = "mcu-A"))', cts_block)

    def test_output_is_deterministic(self):
        first = render_pin_traits(group_tree(_two_mcu_tree(), LOG), GeneratorOptions(), LOG)
        second = render_pin_traits(group_tree(_two_mcu_tree(), LOG), GeneratorOptions(), LOG)
        self.assertEqual(first, second)

    def test_long_enumerations_are_wrapped(self):
        tree = AggregationTree(LOG)
        mcus = [f"STM32F401C{i}Ux" for i in range(10)]
        for number in range(16):
            tree.insert(ParsedSignal("TIM", "TIM1", "1", f"CH{number}"), PinLocation("A", number),
                        "STM32F401", "v1_0", mcus)
        options = GeneratorOptions(line_width=60)
        text = render_pin_traits(group_tree(tree, LOG), options, LOG)

        for line in text.splitlines():
            self.assertLessEqual(len(line), 60, line)
        pins = [f"gpioa::PA{n}" for n in range(16)]
        pin_tokens = [t.rstrip(",") for t in text.split() if t.rstrip(",") in pins]
        self.assertEqual(pin_tokens, pins)

    def test_trait_names(self):
        self.assertEqual(role_trait_name("I2C", "SCL"), "I2CSclPin")
        self.assertEqual(role_trait_name("EVENTOUT", "EVENTOUT"), "EventoutPin")
        self.assertEqual(combined_trait_name("USART"), "UsartPins")


if __name__ == "__main__":
    unittest.main()
