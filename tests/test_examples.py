"""
End-to-end runs of small fumola programs.

Each test builds a term, runs it to a fixpoint and compares the rendered
final system. Comments give the term in surface notation.
"""

from fumola import build as b


def system_text(store: str, procs: str) -> str:
    return f"fumola [\n  store = {store};\n  procs = {procs}\n]\n"


def halted_root(trace: str, store: str = "[]") -> str:
    return system_text(store, f"[% => halted({trace})]")


# ============================================================================
# Returns and records
# ============================================================================


class TestReturns:
    def test_ret_number(self, final) -> None:
        """ret 1"""
        assert final(b.ret(1)) == halted_root("[ret 1]")

    def test_let_ret(self, final) -> None:
        """let x = ret 1; ret x"""
        term = b.let("x", b.ret(1), b.ret("x"))
        assert final(term) == halted_root("[ret 1]")

    def test_let_let_ret(self, final) -> None:
        """let x = ret 1; let y = ret x; ret y"""
        term = b.let("x", b.ret(1), b.let("y", b.ret("x"), b.ret("y")))
        assert final(term) == halted_root("[ret 1]")

    def test_let_nest_ret(self, final) -> None:
        """let x = #$n { ret 1 }; ret x"""
        term = b.let("x", b.nest(b.lit("n"), b.ret(1)), b.ret("x"))
        assert final(term) == halted_root("[#n {ret 1}; ret 1]")


class TestRecords:
    def test_record_single_field(self, final) -> None:
        """ret [$s => 1]"""
        term = b.ret(b.record((b.lit("s"), 1)))
        assert final(term) == halted_root("[ret [$s => 1]]")

    def test_record_two_fields(self, final) -> None:
        """ret [$s => 1; $t => $two]"""
        term = b.ret(b.record((b.lit("s"), 1), (b.lit("t"), b.lit("two"))))
        assert final(term) == halted_root("[ret [$s => 1; $t => $two]]")

    def test_record_labels_from_variables(self, final) -> None:
        """let name = ret $three; let val = ret 3; ret [name => val]"""
        term = b.let(
            "name",
            b.ret(b.lit("three")),
            b.let("val", b.ret(3), b.ret(b.record(("name", "val")))),
        )
        assert final(term) == halted_root("[ret [$three => 3]]")

    def test_record_pattern(self, final) -> None:
        """let [$secret => v] = ret [$secret => 42]; ret [$result => v]"""
        term = b.let(
            b.fields_pat((b.lit("secret"), "v")),
            b.ret(b.record((b.lit("secret"), 42))),
            b.ret(b.record((b.lit("result"), "v"))),
        )
        assert final(term) == halted_root("[ret [$result => 42]]")

    def test_pattern_sees_through_extension(self, final) -> None:
        """let [$a => x; $b => y] = ret [$a => 1], $b => 2; ret #x(y)"""
        rec = b.extend(b.record((b.lit("a"), 1)), b.lit("b"), 2)
        term = b.let(
            b.fields_pat((b.lit("a"), "x"), (b.lit("b"), "y")),
            b.ret(rec),
            b.ret(b.variant("x", "y")),
        )
        assert final(term) == halted_root("[ret #1(2)]")


class TestAssertions:
    def test_equal_succeeds(self, final) -> None:
        """1 == 1"""
        assert final(b.assert_eq(1, 1)) == halted_root("[ret []]")

    def test_not_equal_succeeds(self, final) -> None:
        """1 != 2"""
        assert final(b.assert_ne(1, 2)) == halted_root("[ret []]")

    def test_equal_fails(self, final) -> None:
        """1 == 2"""
        expected = system_text(
            "[]",
            "[% => error(assertionFailure(1 == 2), "
            "[trace = []; stack = []; bxes = []; vals = []; cont = 1 == 2])]",
        )
        assert final(b.assert_eq(1, 2)) == expected

    def test_not_equal_fails_under_binding(self, final) -> None:
        """let x = ret 1; x != 1"""
        term = b.let("x", b.ret(1), b.assert_ne("x", 1))
        expected = system_text(
            "[]",
            "[% => error(assertionFailure(1 != 1), "
            "[trace = []; stack = []; bxes = []; vals = [x => 1]; cont = x != 1])]",
        )
        assert final(term) == expected

    def test_structural_equality(self, final) -> None:
        """[$a => #$b(1)] == [$a => #$b(1)]"""
        rec = b.record((b.lit("a"), b.variant(b.lit("b"), 1)))
        assert final(b.assert_eq(rec, rec)) == halted_root("[ret []]")


# ============================================================================
# Store effects
# ============================================================================


class TestStore:
    def test_put(self, final) -> None:
        """$a := 1"""
        term = b.put(b.lit("a"), 1)
        assert final(term) == halted_root("[put a <= 1]", store="[a => 1]")

    def test_nest_put(self, final) -> None:
        """#$n { $a := 1 }"""
        term = b.nest(b.lit("n"), b.put(b.lit("a"), 1))
        assert final(term) == halted_root("[#n {put n/a <= 1}]", store="[n/a => 1]")

    def test_nest_put_get(self, final) -> None:
        """let x = #$n { $a := 3 }; @x"""
        term = b.let("x", b.nest(b.lit("n"), b.put(b.lit("a"), 3)), b.get("x"))
        assert final(term) == halted_root(
            "[#n {put n/a <= 3}; get n/a => 3]", store="[n/a => 3]"
        )

    def test_nest_ret(self, final) -> None:
        """#$311 { ret 311 }"""
        term = b.nest(b.lit(311), b.ret(311))
        assert final(term) == halted_root("[#311 {ret 311}]")

    def test_get_symbol_is_not_a_pointer(self, final) -> None:
        """@$s"""
        expected = system_text(
            "[]",
            "[% => error(notAPointer($s), "
            "[trace = []; stack = []; bxes = []; vals = []; cont = @$s])]",
        )
        assert final(b.get(b.lit("s"))) == expected

    def test_machine_pointer_is_qualified_by_nest(self, final) -> None:
        """let p = #$n { $a := 1 }; let _ = @p; @!a"""
        term = b.let(
            "p",
            b.nest(b.lit("n"), b.put(b.lit("a"), 1)),
            b.seq(b.get("p"), b.get(b.ptr("a"))),
        )
        expected = system_text(
            "[n/a => 1]",
            "[% => error(undefined(a), "
            "[trace = [#n {put n/a <= 1}; get n/a => 1]; stack = []; bxes = []; "
            "vals = [p => !n/a]; cont = @!a])]",
        )
        assert final(term) == expected

    def test_get_unset_pointer(self, final) -> None:
        """@!s"""
        expected = system_text(
            "[]",
            "[% => error(undefined(s), "
            "[trace = []; stack = []; bxes = []; vals = []; cont = @!s])]",
        )
        assert final(b.get(b.ptr("s"))) == expected

    def test_error_keeps_pending_frames(self, final) -> None:
        """let y = @$s; ret y"""
        term = b.let("y", b.get(b.lit("s")), b.ret("y"))
        expected = system_text(
            "[]",
            "[% => error(notAPointer($s), [trace = []; "
            "stack = [[trace = [], cont = [] ;; [] |- let y = __; ret y]]; "
            "bxes = []; vals = []; cont = @$s])]",
        )
        assert final(term) == expected

    def test_nested_nests_qualify_outermost_first(self, final) -> None:
        """#$n { #$m { $a := 1 } }"""
        term = b.nest(b.lit("n"), b.nest(b.lit("m"), b.put(b.lit("a"), 1)))
        assert final(term) == halted_root(
            "[#n {#m {put n/m/a <= 1}}]", store="[n/m/a => 1]"
        )


# ============================================================================
# Links
# ============================================================================


class TestLinks:
    def test_put_link(self, final) -> None:
        """let _ = $s := 42; &$s"""
        term = b.seq(b.put(b.lit("s"), 42), b.link(b.lit("s")))
        assert final(term) == halted_root(
            "[put s <= 42; link $s => !s]", store="[s => 42]"
        )

    def test_put_link_get(self, final) -> None:
        """let _ = $s := 42; @`(&$s)"""
        term = b.seq(b.put(b.lit("s"), 42), b.get(b.cbv(b.link(b.lit("s")))))
        assert final(term) == halted_root(
            "[put s <= 42; link $s => !s; get s => 42]", store="[s => 42]"
        )

    def test_link_waiting_for_ptr(self, final) -> None:
        """&$s with nothing ever stored at s"""
        expected = system_text(
            "[]",
            "[% => waitingForPtr([trace = []; stack = []; bxes = []; vals = []; "
            "cont = &$s], s)]",
        )
        assert final(b.link(b.lit("s"))) == expected

    def test_link_waits_then_resumes(self, final) -> None:
        """let _ = ~$w { &$s }; $s := 42"""
        term = b.seq(b.spawn(b.lit("w"), b.link(b.lit("s"))), b.put(b.lit("s"), 42))
        expected = system_text(
            "[s => 42; w => ~w]",
            "[% => halted([put s <= 42]); w => halted([link $s => !s])]",
        )
        assert final(term) == expected

    def test_link_invalid_proc(self, final) -> None:
        """&~s"""
        expected = system_text(
            "[]",
            "[% => error(invalidProc(s), "
            "[trace = []; stack = []; bxes = []; vals = []; cont = &~s])]",
        )
        assert final(b.link(b.proc("s"))) == expected

    def test_link_wait_for_halt(self, final) -> None:
        """let p = ~$p { ret 42 }; &p"""
        term = b.let("p", b.spawn(b.lit("p"), b.ret(42)), b.link("p"))
        expected = system_text(
            "[p => ~p]",
            "[% => halted([link ~p => 42]); p => halted([ret 42])]",
        )
        assert final(term) == expected

    def test_link_number_is_not_a_target(self, final) -> None:
        """&5"""
        expected = system_text(
            "[]",
            "[% => error(notLinkTarget(5), "
            "[trace = []; stack = []; bxes = []; vals = []; cont = &5])]",
        )
        assert final(b.link(5)) == expected


# ============================================================================
# Spawn
# ============================================================================


class TestSpawn:
    def test_spawn(self, final) -> None:
        """~$x { ret 1 }"""
        term = b.spawn(b.lit("x"), b.ret(1))
        expected = system_text(
            "[x => ~x]",
            "[% => halted([]); x => halted([ret 1])]",
        )
        assert final(term) == expected

    def test_nest_spawn(self, final) -> None:
        """#$n { ~$x { ret 1 } }"""
        term = b.nest(b.lit("n"), b.spawn(b.lit("x"), b.ret(1)))
        expected = system_text(
            "[n/x => ~n/x]",
            "[% => halted([#n {}]); n/x => halted([ret 1])]",
        )
        assert final(term) == expected

    def test_spawn_inherits_environment(self, final) -> None:
        """let r = ret 1; ~$x { ret r }"""
        term = b.let("r", b.ret(1), b.spawn(b.lit("x"), b.ret("r")))
        expected = system_text(
            "[x => ~x]",
            "[% => halted([]); x => halted([ret 1])]",
        )
        assert final(term) == expected

    def test_spawn_duplicate(self, final) -> None:
        """let _ = ~$x { ret 1 }; ~$x { ret 2 }"""
        term = b.seq(b.spawn(b.lit("x"), b.ret(1)), b.spawn(b.lit("x"), b.ret(2)))
        expected = system_text(
            "[x => ~x]",
            "[% => error(duplicate(x), [trace = []; stack = []; bxes = []; vals = []; "
            "cont = ~$x { __ }]); x => halted([ret 1])]",
        )
        assert final(term) == expected

    def test_spawn_under_root_name(self, final) -> None:
        """~$% { ret 1 }"""
        term = b.spawn(b.lit(None), b.ret(1))
        expected = system_text(
            "[]",
            "[% => error(duplicate(%), [trace = []; stack = []; bxes = []; vals = []; "
            "cont = ret_ ~%])]",
        )
        assert final(term) == expected


# ============================================================================
# Boxes, functions, switch and projection
# ============================================================================


class TestBoxes:
    def test_rec_box_returns_itself(self, final) -> None:
        """box rec z { ret z }; z"""
        term = b.box_def("z", b.ret("z"), b.extract("z"), rec=True)
        assert final(term) == halted_root("[ret rec z {[] |- ret z}]")

    def test_let_box_with_nest(self, final) -> None:
        """let box f = ret { #$n { $a := 1 } }; f"""
        term = b.let_box(
            "f",
            b.ret(b.box(b.nest(b.lit("n"), b.put(b.lit("a"), 1)))),
            b.extract("f"),
        )
        assert final(term) == halted_root("[#n {put n/a <= 1}]", store="[n/a => 1]")

    def test_box_captures_boxes_in_scope(self, final) -> None:
        """box k { ret 5 }; box f { k }; f"""
        term = b.box_def(
            "k",
            b.ret(5),
            b.box_def("f", b.extract("k"), b.extract("f")),
        )
        assert final(term) == halted_root("[ret 5]")

    def test_call_by_value_arguments(self, final) -> None:
        """box id3 {\\x => \\y => \\z => ret x}; ... ; id3 `(one) `(two) `(three)"""
        id3 = b.lam("x", b.lam("y", b.lam("z", b.ret("x"))))
        call = b.app(
            b.extract("id3"),
            b.cbv(b.extract("one")),
            b.cbv(b.extract("two")),
            b.cbv(b.extract("three")),
        )
        term = b.box_def(
            "id3",
            id3,
            b.box_def(
                "one",
                b.ret(1),
                b.box_def("two", b.ret(2), b.box_def("three", b.ret(3), call)),
            ),
        )
        assert final(term) == halted_root("[ret 1]")

    def test_recursive_box_walks_variants(self, final) -> None:
        """box rec walk {\\v => switch v { #$more(r) {...walk r}; #$done(x) {ret x} }}"""
        walk = b.lam(
            "v",
            b.switch(
                "v",
                b.case(
                    b.lit("more"),
                    "rest",
                    b.let_box("self", b.ret("walk"), b.call("self", "rest")),
                ),
                b.case(b.lit("done"), "x", b.ret("x")),
            ),
        )
        chain = b.variant(
            b.lit("more"), b.variant(b.lit("more"), b.variant(b.lit("done"), 7))
        )
        term = b.box_def("walk", walk, b.call("walk", chain), rec=True)
        assert final(term) == halted_root("[ret 7]")


class TestControl:
    def test_project_branches(self, final) -> None:
        """{ $apple => ret 1; $banana => \\x => x := x } <= $apple"""
        term = b.project(
            b.branches(
                b.branch(b.lit("apple"), b.ret(1)),
                b.branch(b.lit("banana"), b.lam("x", b.put("x", "x"))),
            ),
            b.lit("apple"),
        )
        assert final(term) == halted_root("[ret 1]")

    def test_let_switch(self, final) -> None:
        """let a = ret $apple; switch #a(1) { #a(x) {ret x}; #$banana(x) {ret x} }"""
        term = b.let(
            "a",
            b.ret(b.lit("apple")),
            b.switch(
                b.variant("a", 1),
                b.case("a", "x", b.ret("x")),
                b.case(b.lit("banana"), "x", b.ret("x")),
            ),
        )
        assert final(term) == halted_root("[ret 1]")

    def test_lambda_application(self, final) -> None:
        """(\\x => \\y => ret [x => y]) $k 9"""
        term = b.app(b.lam("x", b.lam("y", b.ret(b.record(("x", "y"))))), b.lit("k"), 9)
        assert final(term) == halted_root("[ret [$k => 9]]")
