from obstree import MemoryStorage, observable, persist_observable

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Defining an observable tree")
print("-" * 100)
print()

# Any plain dict or list can be tracked. The data itself stays a plain dict.
state = observable({"settings": {"theme": "light", "font": 12}, "todos": []})
settings = state.root["settings"]


def log_settings(value, info):
    print(f"settings changed at {info.path}: {info.prev_value!r} -> {info.value!r}")


dispose = settings.on_change(log_settings)
settings.set("theme", "dark")  # settings changed at ['theme']: 'light' -> 'dark'

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Replacing a whole sub-object")
print("-" * 100)
print()

# A listener on a deeper path keeps working when its ancestor is swapped out.
state.at("settings", "font").on_change(lambda value, info: print(f"font is now {value}"))

state.root.set("settings", {"theme": "dark", "font": 14})  # font is now 14

# The accessor bound to the old settings dict is stale now.
print(f"old accessor stale: {settings.is_stale}")
dispose()

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Lists")
print("-" * 100)
print()

todos = state.root["todos"]
todos.on_change_shallow(lambda value, info: print(f"todos: {value}"))

todos.push("write docs")  # todos: ['write docs']
todos.push("ship it")  # todos: ['write docs', 'ship it']
todos.splice(0, 1)  # todos: ['ship it']

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("One-shot helpers")
print("-" * 100)
print()

state.at("ready").on_true(lambda value: print("ready!"))
state.root.set("ready", False)
state.root.set("ready", True)  # ready!
state.root.set("ready", True)  # (already fired, nothing printed)

# ------------------------------------------------------------------------------------------------

print()
print("=" * 100)
print("Persistence")
print("-" * 100)
print()

storage = MemoryStorage()
handle = persist_observable(state, "state", storage)
todos.push("persist me")
print(storage.get_item("state"))

restored = observable({"settings": {}, "todos": []})
persist_observable(restored, "state", storage).dispose()
print(restored.read("todos"))  # ['ship it', 'persist me']
handle.dispose()
