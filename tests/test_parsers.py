import logging
import unittest
import xml.etree.ElementTree as ET

from cube_parse.hal.parsers import (
    parse_af_literal,
    parse_gpio_pins,
    parse_gpio_version,
    parse_mcu_ref_name,
    parse_signal,
    parse_signal_name,
)
from cube_parse.hal.pin_signal import ParsedSignal, PinLocation

LOG = logging.getLogger("tests.parsers")


class TestSignalNameParser(unittest.TestCase):
    def test_parses_serial_signal(self):
        parsed = parse_signal("USART2_TX", "GPIO_AF7_USART2", LOG)
        self.assertEqual(parsed, ParsedSignal(stem="USART", device="USART2", af_code="7", io_role="TX"))

    def test_parses_i2c_stem_with_inner_digit(self):
        self.assertEqual(parse_signal_name("I2C1_SCL", LOG), ("I2C", "I2C1", "SCL"))

    def test_parses_i2s_ext_device(self):
        self.assertEqual(parse_signal_name("I2S2ext_SD", LOG), ("I2S", "I2S2ext", "SD"))

    def test_parses_complementary_timer_channel(self):
        self.assertEqual(parse_signal_name("TIM3_CH1N", LOG), ("TIM", "TIM3", "CH1N"))

    def test_role_keeps_underscores(self):
        self.assertEqual(parse_signal_name("SAI1_MCLK_A", LOG), ("SAI", "SAI1", "MCLK_A"))
        self.assertEqual(parse_signal_name("SYS_JTCK-SWCLK", LOG), ("SYS", "SYS", "JTCK-SWCLK"))

    def test_roleless_allow_listed_stems_do_not_warn(self):
        with self.assertNoLogs(LOG, level="WARNING"):
            self.assertEqual(parse_signal_name("EVENTOUT", LOG), ("EVENTOUT", "EVENTOUT", "EVENTOUT"))
            self.assertEqual(parse_signal_name("MCO1", LOG), ("MCO", "MCO1", "MCO"))

    def test_missing_role_falls_back_to_stem_with_warning(self):
        with self.assertLogs(LOG, level="WARNING") as cm:
            self.assertEqual(parse_signal_name("JTDI", LOG), ("JTDI", "JTDI", "JTDI"))
        self.assertEqual(len(cm.records), 1)
        self.assertIn("JTDI", cm.output[0])

    def test_unparsable_name_is_dropped(self):
        with self.assertLogs(LOG, level="WARNING") as cm:
            self.assertIsNone(parse_signal("usart2_tx", "GPIO_AF7_USART2", LOG))
        self.assertIn("usart2_tx", cm.output[0])

    def test_af_literal(self):
        self.assertEqual(parse_af_literal("GPIO_AF7_USART2", LOG), "7")
        self.assertEqual(parse_af_literal("GPIO_AF10_OTG_FS", LOG), "10")

    def test_invalid_af_literal_drops_signal(self):
        with self.assertLogs(LOG, level="WARNING") as cm:
            self.assertIsNone(parse_signal("USART2_TX", "GPIO_USART2", LOG))
        self.assertTrue(any("GPIO_USART2" in line for line in cm.output))


class TestDeviceNameParser(unittest.TestCase):
    def test_gpio_version(self):
        self.assertEqual(parse_gpio_version("STM32L152x8_gpio_v1_0", LOG), ("STM32L152x8", "v1_0"))
        self.assertEqual(parse_gpio_version("STM32F333_gpio_v1_1", LOG), ("STM32F333", "v1_1"))

    def test_gpio_version_errors(self):
        with self.assertLogs(LOG, level="WARNING") as cm:
            # wrong pattern
            self.assertIsNone(parse_gpio_version("STM32F333_qqio_v1_0", LOG))
            # too many underscores
            self.assertIsNone(parse_gpio_version("STM32_STM32F333_gpio_v1_0", LOG))
        self.assertEqual(len(cm.records), 2)

    def test_mcu_ref_name(self):
        fields = parse_mcu_ref_name("STM32L051K8Tx", LOG)
        self.assertEqual(fields["line"], "STM32L051")
        self.assertEqual(fields["pin_count"], "K")
        self.assertEqual(fields["package"], "T")
        self.assertEqual(parse_mcu_ref_name("STM32WB55RGVx", LOG)["line"], "STM32WB55")
        self.assertEqual(parse_mcu_ref_name("STM32L4R5ZITxP", LOG)["option"], "P")

    def test_unparsable_mcu_ref_name(self):
        with self.assertLogs(LOG, level="WARNING"):
            self.assertIsNone(parse_mcu_ref_name("LPC1768", LOG))


GPIO_MODES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<IP xmlns="http://mcd.rou.st.com/modules.php?name=mcu" Name="GPIO" Version="STM32L051_gpio_v1_0">
  <GPIO_Pin PortName="PA" Name="PA9">
    <SpecificParameter Name="GPIO_Pin"><PossibleValue>GPIO_PIN_9</PossibleValue></SpecificParameter>
    <PinSignal Name="USART1_TX">
      <SpecificParameter Name="GPIO_AF"><PossibleValue>GPIO_AF4_USART1</PossibleValue></SpecificParameter>
    </PinSignal>
    <PinSignal Name="TIM22_CH1">
      <SpecificParameter Name="GPIO_AF"><PossibleValue>GPIO_AF5_TIM22</PossibleValue></SpecificParameter>
    </PinSignal>
    <PinSignal Name="ADC_IN9"/>
  </GPIO_Pin>
  <GPIO_Pin PortName="PC" Name="PC14-OSC32_IN">
    <SpecificParameter Name="GPIO_Pin"><PossibleValue>GPIO_PIN_14</PossibleValue></SpecificParameter>
  </GPIO_Pin>
  <GPIO_Pin PortName="" Name="VDD"/>
</IP>
"""


class TestGpioPinsParser(unittest.TestCase):
    def test_parses_pins_and_af_signals(self):
        pins = parse_gpio_pins(ET.fromstring(GPIO_MODES_XML), LOG)
        self.assertEqual([p.location for p in pins], [PinLocation("A", 9), PinLocation("C", 14)])

        pa9 = pins[0]
        self.assertEqual([s.name for s in pa9.signals], ["USART1_TX", "TIM22_CH1"])
        self.assertEqual(pa9.signals[0].af_literal, "GPIO_AF4_USART1")
        self.assertEqual(pins[1].name, "PC14-OSC32_IN")
        self.assertEqual(pins[1].signals, ())


if __name__ == "__main__":
    unittest.main()
