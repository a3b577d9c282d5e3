import asyncio

from ripple import Observable, filtered, merge, reject


def section(title):
    print()
    print("=" * 100)
    print(title)
    print("-" * 100)
    print()


async def main():
    loop = asyncio.get_running_loop()

    # ------------------------------------------------------------------------------------------------

    section("Subscribing with sync and async transforms")

    linear = Observable()

    async def square_later(x):
        await asyncio.sleep(0.05)
        return x * x

    # Each subscribe() creates a new node fed by the one it was called on.
    quad = linear.subscribe(square_later)
    negated = linear.subscribe(lambda x: -x)

    quad.subscribe(lambda v: print(f"quad: {v}"), lambda e: print(f"quad failed: {e!r}"))
    negated.subscribe(lambda v: print(f"negated: {v}"))

    linear.emit(3)
    await asyncio.sleep(0.1)

    # Errors travel down the same tree as values.
    linear.emit(reject(ValueError("reason")))
    await asyncio.sleep(0.1)

    # Detach one branch; negated keeps receiving values.
    quad.unsubscribe()
    linear.emit(4)
    await asyncio.sleep(0.1)

    # ------------------------------------------------------------------------------------------------

    section("Filtering")

    keyup = Observable()
    text = keyup.subscribe(lambda event: event["value"])
    text.subscribe(filtered(lambda s: len(s) > 3)).subscribe(lambda s: print(f"long text: {s}"))

    for typed in ("r", "ri", "rip", "ripp", "ripple"):
        keyup.emit({"value": typed})
    await asyncio.sleep(0.01)

    # ------------------------------------------------------------------------------------------------

    section("Merging two timers")

    def ticker(label, interval, count):
        def producer(emit):
            for n in range(1, count + 1):
                loop.call_later(interval * n, emit, f"{label} #{n}")

        return producer

    one = Observable(ticker("one", 0.01, 3))
    two = Observable(ticker("two", 0.02, 2))
    merge([one, two]).subscribe(lambda v: print(f"merged: {v}"))
    await asyncio.sleep(0.1)

    # ------------------------------------------------------------------------------------------------

    section("Combining rounds with Observable.all and Observable.tree")

    src = Observable()
    plus_one = src.subscribe(lambda v: v + 1)
    plus_two = src.subscribe(lambda v: asyncio.sleep(0.01, result=v + 2))

    # Walk the tree before adding more subscribers to its leaves.
    Observable.tree(src).subscribe(lambda leaves: print(f"tree: {leaves}"))
    Observable.all([plus_one, plus_two]).subscribe(lambda pair: print(f"all: {pair}"))

    src.emit(0)
    await asyncio.sleep(0.05)
    src.emit(10)
    await asyncio.sleep(0.05)


if __name__ == "__main__":
    asyncio.run(main())
