from keypad.engine import Engine
from keypad.keymap import KeymapError, type_keys

for keys in [
    "5",
    "12.",
    "2+3*4=",
    "100+10%=",
    "100*10%=",
    "2*2===",
    "1/0=",
    "1/0=5",
    "50%=",
    "5+%",
    "7+n3=",
    "1/3=",
    "99999999*99999999=",
    "12345678901234",
    "3+x",
]:
    print("=" * 10)
    print(f"keys: {keys!r}")
    engine = Engine()
    try:
        type_keys(engine, keys)
    except KeymapError as e:
        print(e)
        continue

    print(f"tokens: {' '.join(str(t) for t in engine.session.tokens)}")
    print(f"expression: {engine.expression_text!r}")
    print(f"display: {engine.display_text!r} ({engine.state}, {engine.clear_button_label})")
