"""Unit tests for value kinds and enum tables."""

from ipaddress import IPv4Address, IPv6Address

from ftlconf.config.types import (
    ENUM_TYPES,
    BlockingMode,
    BusyReply,
    ConfType,
    PrivacyLevel,
    PtrType,
    RefreshHostnames,
    check_value,
    from_token,
    is_integer_kind,
    options,
    token,
)


class TestTokens:
    """Tests for enum token mapping."""

    def test_from_token_exact_match(self) -> None:
        """Should map a canonical token to its member."""
        assert from_token(BlockingMode, "NX") is BlockingMode.NX
        assert from_token(PtrType, "PI.HOLE") is PtrType.PIHOLE

    def test_from_token_is_case_sensitive(self) -> None:
        """Should not match tokens in another case."""
        assert from_token(BlockingMode, "nx") is None
        assert from_token(RefreshHostnames, "all") is None

    def test_from_token_unknown(self) -> None:
        """Should return None for unknown tokens."""
        assert from_token(BusyReply, "MAYBE") is None

    def test_token_of_member(self) -> None:
        """Should return the canonical token of a member."""
        assert token(PtrType.PIHOLE) == "PI.HOLE"
        assert token(BlockingMode.IP_NODATA_AAAA) == "IP_NODATA_AAAA"

    def test_options_in_declaration_order(self) -> None:
        """Should list all tokens in declaration order."""
        assert options(BusyReply) == ["BLOCK", "ALLOW", "REFUSE", "DROP"]
        assert options(RefreshHostnames) == ["IPV4_ONLY", "ALL", "UNKNOWN", "NONE"]

    def test_every_enum_kind_has_a_class(self) -> None:
        """Should back every ENUM_* kind with an enum class."""
        enum_kinds = [k for k in ConfType if k.name.startswith("ENUM_")]
        assert sorted(k.name for k in enum_kinds) == sorted(
            k.name for k in ENUM_TYPES
        )


class TestPrivacyLevel:
    """Tests for the PrivacyLevel ordering."""

    def test_levels_are_ordered(self) -> None:
        """Should order levels from least to most private."""
        assert PrivacyLevel.SHOW_ALL < PrivacyLevel.HIDE_DOMAINS
        assert PrivacyLevel.MAXIMUM < PrivacyLevel.NOSTATS
        assert int(PrivacyLevel.NOSTATS) == 4


class TestCheckValue:
    """Tests for check_value()."""

    def test_bool(self) -> None:
        """Should accept only real booleans for BOOL."""
        assert check_value(ConfType.BOOL, True)
        assert not check_value(ConfType.BOOL, 1)
        assert not check_value(ConfType.BOOL, "true")

    def test_bool_is_not_an_integer(self) -> None:
        """Should reject booleans for integer kinds."""
        assert not check_value(ConfType.INT, True)

    def test_int_ranges(self) -> None:
        """Should enforce C integer widths."""
        assert check_value(ConfType.INT, -(2**31))
        assert not check_value(ConfType.INT, 2**31)
        assert check_value(ConfType.UINT, 2**32 - 1)
        assert not check_value(ConfType.UINT, -1)
        assert check_value(ConfType.LONG, 2**40)
        assert not check_value(ConfType.ULONG, -1)

    def test_string(self) -> None:
        """Should accept str only."""
        assert check_value(ConfType.STRING, "")
        assert not check_value(ConfType.STRING, None)

    def test_addresses(self) -> None:
        """Should require address objects of the right family."""
        assert check_value(ConfType.IPV4_ADDRESS, IPv4Address("10.0.0.1"))
        assert not check_value(ConfType.IPV4_ADDRESS, "10.0.0.1")
        assert not check_value(ConfType.IPV4_ADDRESS, IPv6Address("::1"))
        assert check_value(ConfType.IPV6_ADDRESS, IPv6Address("::1"))

    def test_enums(self) -> None:
        """Should require a member of the matching enum."""
        assert check_value(ConfType.ENUM_BLOCKING_MODE, BlockingMode.NULL)
        assert not check_value(ConfType.ENUM_BLOCKING_MODE, "NULL")
        assert not check_value(ConfType.ENUM_BLOCKING_MODE, BusyReply.BLOCK)
        assert check_value(ConfType.ENUM_PRIVACY_LEVEL, PrivacyLevel.MAXIMUM)

    def test_is_integer_kind(self) -> None:
        """Should classify the integer kinds."""
        assert is_integer_kind(ConfType.ULONG)
        assert not is_integer_kind(ConfType.ENUM_PRIVACY_LEVEL)
