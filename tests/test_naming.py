from luamin.naming import LUA_KEYWORDS, MinifySession


def test_first_names_follow_alphabet():
    session = MinifySession()
    assert [session.rename(n) for n in ("x", "y", "z")] == ["a", "b", "c"]


def test_rename_is_memoized():
    session = MinifySession()
    first = session.rename("counter")
    session.rename("other")
    assert session.rename("counter") == first


def test_reserved_names_are_skipped():
    session = MinifySession({"a"})
    assert session.rename("x") == "b"
    assert session.rename("y") == "c"


def test_reserve_after_construction():
    session = MinifySession()
    session.reserve(["a", "b"])
    assert session.rename("x") == "c"


def test_self_and_env_are_kept():
    session = MinifySession()
    assert session.rename("self") == "self"
    assert session.rename("_ENV") == "_ENV"
    assert session.rename("x") == "a"


def test_long_run_is_collision_free():
    session = MinifySession({"print"})
    names = [session.rename(f"v{i}") for i in range(4000)]
    assert len(set(names)) == len(names)
    assert not set(names) & LUA_KEYWORDS
    assert all(not name[0].isdigit() for name in names)
    assert names[52] == "_"
    assert names[53] == "a0"
    assert "dn" in names and "dp" in names and "do" not in names
