"""PHP-literal codec: restricted parsing and short-array rendering.

The decoder must accept only literal expressions; anything that would need
code execution is rejected with ``InvalidFormat``.
"""

from __future__ import annotations

import math

import pytest

from lib_tree_config.adapters.codecs.literal import PHPLiteralCodec
from lib_tree_config.domain.errors import InvalidFormat


@pytest.fixture()
def codec() -> PHPLiteralCodec:
    return PHPLiteralCodec()


def test_decode_typical_config_file(codec: PHPLiteralCodec) -> None:
    text = """<?php
// application settings
/* generated */
return array(
    'debug' => true,
    "name" => "demo", # trailing comment
    'db' => [
        'host' => 'localhost',
        'port' => 5432,
        'ratio' => 0.5,
        'password' => null,
    ],
    'tags' => ['a', 'b'],
);
"""
    assert codec.decode(text) == {
        "debug": True,
        "name": "demo",
        "db": {"host": "localhost", "port": 5432, "ratio": 0.5, "password": None},
        "tags": ["a", "b"],
    }


def test_closing_tag_and_missing_semicolon_are_tolerated(codec: PHPLiteralCodec) -> None:
    assert codec.decode("<?php return ['a' => 1] ?>") == {"a": 1}
    assert codec.decode("return [1, 2];") == [1, 2]


def test_keys_follow_array_casts(codec: PHPLiteralCodec) -> None:
    assert codec.decode("<?php return [1 => 'a', 'x' => 'b', 'c'];") == {1: "a", "x": "b", 2: "c"}
    assert codec.decode("<?php return ['0' => 'a', '1' => 'b'];") == ["a", "b"]
    assert codec.decode("<?php return [true => 'a', '01' => 'b'];") == {1: "a", "01": "b"}


def test_numbers(codec: PHPLiteralCodec) -> None:
    data = codec.decode("<?php return [0x1A, -5, 1.5e3, .5, INF, -INF];")
    assert data[:4] == [26, -5, 1500.0, 0.5]
    assert data[4] == math.inf and data[5] == -math.inf
    assert math.isnan(codec.decode("<?php return [NAN];")[0])


def test_string_escapes(codec: PHPLiteralCodec) -> None:
    data = codec.decode(r"""<?php return ['it\'s', "tab\there", "\x41\u{263A}", "\$HOME", 'raw\n'];""")
    assert data == ["it's", "tab\there", "A☺", "$HOME", "raw\\n"]


def test_empty_array_decodes_to_empty_mapping(codec: PHPLiteralCodec) -> None:
    assert codec.decode("<?php return [];") == {}


@pytest.mark.parametrize(
    "text",
    [
        "<?php return system('ls');",
        "<?php return $config;",
        "<?php $x = 1; return [];",
        "<?php return PHP_EOL;",
        '<?php return ["home" => "$HOME"];',
        "<?php return [1, 2] + [3];",
        "<?php echo 'hi';",
        "<?php return 'scalar';",
        "<?php return [1, 2",
    ],
)
def test_non_literal_input_is_rejected(codec: PHPLiteralCodec, text: str) -> None:
    with pytest.raises(InvalidFormat):
        codec.decode(text)


def test_encode_layout(codec: PHPLiteralCodec) -> None:
    text = codec.encode({"foo": "bar", "list": [1, None], "flags": {"on": True, "off": False}, "empty": []})
    assert text == (
        "<?php\n\n"
        "return [\n"
        "    'foo' => 'bar',\n"
        "    'list' => [\n"
        "        1,\n"
        "        null,\n"
        "    ],\n"
        "    'flags' => [\n"
        "        'on' => true,\n"
        "        'off' => false,\n"
        "    ],\n"
        "    'empty' => [],\n"
        "];\n"
    )


def test_round_trip(codec: PHPLiteralCodec) -> None:
    data = {
        "quote": "it's a \\ backslash",
        "unicode": "héllo",
        "numbers": [1, -2, 0.25, 1e20],
        "nested": {"deep": {"deeper": [True, False, None]}},
        5: "integer key",
    }
    assert codec.decode(codec.encode(data)) == data


def test_special_floats_render_as_constants(codec: PHPLiteralCodec) -> None:
    text = codec.encode({"values": [math.inf, -math.inf, math.nan]})
    assert "INF," in text and "-INF," in text and "NAN," in text
