from ainotes.services.reorder_service import array_move, handle_drag_end, resolve_drag


# ========== array_move ==========
def test_array_move_forward():
    assert array_move(["A", "B", "C", "D"], 0, 2) == ["B", "C", "A", "D"]

def test_array_move_backward():
    assert array_move(["A", "B", "C", "D"], 3, 0) == ["D", "A", "B", "C"]

def test_array_move_same_index():
    assert array_move(["A", "B"], 1, 1) == ["A", "B"]

def test_array_move_does_not_touch_input():
    items = ["A", "B", "C"]
    array_move(items, 0, 2)
    assert items == ["A", "B", "C"]

# ========== drag ==========
def test_resolve_drag(store):
    a = store.add_block({"type": "text", "content": "A"})
    b = store.add_block({"type": "text", "content": "B"})
    c = store.add_block({"type": "text", "content": "C"})

    assert resolve_drag(store.blocks, a.id, c.id) == (0, 2)
    assert resolve_drag(store.blocks, c.id, b.id) == (2, 1)

def test_resolve_drag_unresolvable(store):
    a = store.add_block({"type": "text", "content": "A"})

    assert resolve_drag(store.blocks, a.id, None) is None
    assert resolve_drag(store.blocks, a.id, a.id) is None
    assert resolve_drag(store.blocks, a.id, "missing") is None
    assert resolve_drag(store.blocks, "missing", a.id) is None

def test_handle_drag_end_moves_block(store):
    a = store.add_block({"type": "text", "content": "A"})
    store.add_block({"type": "text", "content": "B"})
    c = store.add_block({"type": "text", "content": "C"})

    assert handle_drag_end(store, a.id, c.id) is True
    assert [b.content for b in store.blocks] == ["B", "C", "A"]

def test_handle_drag_end_after_concurrent_delete(store):
    """Le block survolé a été supprimé pendant le drag -> rien ne bouge"""
    a = store.add_block({"type": "text", "content": "A"})
    b = store.add_block({"type": "text", "content": "B"})
    store.delete_block(b.id)
    seen = []
    store.subscribe(lambda action, s: seen.append(action))

    assert handle_drag_end(store, a.id, b.id) is False
    assert [x.content for x in store.blocks] == ["A"]
    assert seen == []
