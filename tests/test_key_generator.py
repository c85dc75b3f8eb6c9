from backoffice.services.key_generator import (
    LICENSE_KEY_ALPHABET,
    LICENSE_KEY_LENGTH,
    LICENSE_KEY_PATTERN,
    generate_license_key,
    normalize_license_key,
)


def test_generated_key_shape():
    for _ in range(200):
        key = generate_license_key()
        assert len(key) == LICENSE_KEY_LENGTH
        assert LICENSE_KEY_PATTERN.match(key)


def test_alphabet_excludes_ambiguous_characters():
    for ch in "01OI":
        assert ch not in LICENSE_KEY_ALPHABET
    assert len(LICENSE_KEY_ALPHABET) == 32


def test_keys_are_not_repeated_in_a_small_sample():
    keys = {generate_license_key() for _ in range(500)}
    assert len(keys) == 500


def test_normalize_license_key():
    assert normalize_license_key("  k7qxm2rthd \n") == "K7QXM2RTHD"
    assert normalize_license_key(None) == ""
    assert normalize_license_key("   ") == ""
