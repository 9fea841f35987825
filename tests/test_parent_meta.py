import base64

from utils.parent_meta import (
    PARENT_META_PREFIX,
    decode_parent_metadata,
    encode_parent_metadata,
    merge_parent_metadata,
    unpack_parent,
)


def test_encode_decode_round_trip():
    bag = {'username': 'mom', 'password': 'x', 'studentId': '7', 'phone': '+998901234567', 'telegramChatId': '55'}
    encoded = encode_parent_metadata(bag)
    assert encoded.startswith(PARENT_META_PREFIX)
    assert decode_parent_metadata(encoded) == bag


def test_encode_drops_empty_and_unknown_fields():
    encoded = encode_parent_metadata({'username': 'mom', 'phone': '', 'favouriteColour': 'red'})
    assert decode_parent_metadata(encoded) == {'username': 'mom'}


def test_decode_rejects_plain_and_broken_values():
    assert decode_parent_metadata(None) is None
    assert decode_parent_metadata('') is None
    assert decode_parent_metadata('+998901234567') is None
    assert decode_parent_metadata(PARENT_META_PREFIX + '!!!not-base64') is None
    not_json = base64.b64encode(b'hello').decode()
    assert decode_parent_metadata(PARENT_META_PREFIX + not_json) is None
    a_list = base64.b64encode(b'[1, 2]').decode()
    assert decode_parent_metadata(PARENT_META_PREFIX + a_list) is None


def test_decode_keeps_only_string_values():
    payload = base64.b64encode(b'{"username": "mom", "studentId": 7}').decode()
    assert decode_parent_metadata(PARENT_META_PREFIX + payload) == {'username': 'mom'}


def test_unpack_falls_back_to_raw_phone():
    unpacked = unpack_parent({'id': 1, 'phone': '+998901234567'})
    assert unpacked['phone'] == '+998901234567'
    assert unpacked['username'] is None


def test_unpack_uses_metadata_phone():
    stored = encode_parent_metadata({'username': 'mom', 'phone': '+998907654321'})
    unpacked = unpack_parent({'id': 1, 'phone': stored})
    assert unpacked['phone'] == '+998907654321'
    assert unpacked['username'] == 'mom'


def test_merge_seeds_legacy_phone_and_keeps_untouched_fields():
    stored = merge_parent_metadata('+998901234567', username='mom')
    assert decode_parent_metadata(stored) == {'phone': '+998901234567', 'username': 'mom'}

    stored = merge_parent_metadata(stored, telegramChatId=42, username=None)
    assert decode_parent_metadata(stored) == {
        'phone': '+998901234567',
        'username': 'mom',
        'telegramChatId': '42',
    }


def test_merge_empty_string_clears_field():
    stored = merge_parent_metadata(encode_parent_metadata({'username': 'mom', 'phone': '1'}), phone='')
    assert decode_parent_metadata(stored) == {'username': 'mom'}


def test_unpack_empty_bag_has_no_phone():
    stored = encode_parent_metadata({})
    assert decode_parent_metadata(stored) == {}
    unpacked = unpack_parent({'id': 1, 'phone': stored})
    assert unpacked['phone'] is None
    assert unpacked['username'] is None


def test_unpack_never_leaks_undecodable_bag():
    assert unpack_parent({'id': 1, 'phone': PARENT_META_PREFIX + '!!!'})['phone'] is None


def test_decode_tolerates_line_breaks_and_missing_padding():
    payload = base64.b64encode(b'{"username": "mom"}').decode().rstrip('=')
    wrapped = payload[:8] + '\n' + payload[8:]
    assert decode_parent_metadata(PARENT_META_PREFIX + wrapped) == {'username': 'mom'}
