import asyncio

from number_search.models import EnrichedPerson, PersonBasic, PersonSearchResult, PhoneNumber, RoleInfo
from number_search.services.concurrency import chunk, run_in_batches, settle_all
from number_search.services.enrichment import enrich_many, enrich_selection, valid_person_ids


class Recorder:
    """Fake per-id enrichment that tracks concurrency."""

    def __init__(self, fail=(), missing=()):
        self.calls = []
        self.starts = []
        self.in_flight = 0
        self.fail = set(fail)
        self.missing = set(missing)

    async def __call__(self, person_id):
        self.calls.append(person_id)
        self.in_flight += 1
        self.starts.append(self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        if person_id in self.fail:
            raise RuntimeError(f"boom {person_id}")
        if person_id in self.missing:
            return None
        return EnrichedPerson(id=person_id, source="forager")


def test_invalid_ids_never_reach_the_provider():
    recorder = Recorder()
    people = asyncio.run(enrich_many(["", "undefined", "42"], recorder, numeric=True))

    assert recorder.calls == ["42"]
    assert [p.id for p in people] == ["42"]


def test_numeric_filter_only_applies_to_numeric_providers():
    assert valid_person_ids(["abc", "7", None, "undefined"], numeric=True) == ["7"]
    assert valid_person_ids(["abc", "7", None, "undefined"], numeric=False) == ["abc", "7"]


def test_numeric_ids_are_plain_ascii_digits():
    ids = ["1_000", "\u0664\u0662", " 42 ", "-7", "+5", "12abc"]
    assert valid_person_ids(ids, numeric=True) == [" 42 ", "-7"]


def test_seven_ids_run_as_two_sequential_batches():
    recorder = Recorder()
    ids = [str(i) for i in range(1, 8)]

    asyncio.run(enrich_many(ids, recorder, numeric=True, batch_size=5))

    # All five of the first batch are in flight together, then two
    assert recorder.starts == [1, 2, 3, 4, 5, 1, 2]
    assert recorder.calls == ids


def test_failures_and_not_found_are_dropped_in_order():
    recorder = Recorder(fail={"2"}, missing={"4"})
    people = asyncio.run(enrich_many(["1", "2", "3", "4", "5"], recorder, numeric=True))

    assert [p.id for p in people] == ["1", "3", "5"]


def test_no_valid_ids_means_no_calls():
    recorder = Recorder()
    assert asyncio.run(enrich_many(["", "undefined"], recorder, numeric=False)) == []
    assert recorder.calls == []


def test_settle_all_keeps_launch_order():
    async def value(v, delay):
        await asyncio.sleep(delay)
        if v == "bad":
            raise ValueError(v)
        return v

    outcomes = asyncio.run(settle_all([value("a", 0.02), value("bad", 0), value("c", 0)]))

    assert [o.ok for o in outcomes] == [True, False, True]
    assert outcomes[0].value == "a"
    assert isinstance(outcomes[1].error, ValueError)


def test_chunk_sizes():
    assert chunk([1, 2, 3, 4, 5, 6, 7], 3) == [[1, 2, 3], [4, 5, 6], [7]]
    assert chunk([], 3) == []


def test_run_in_batches_aligns_outcomes_with_input():
    async def double(x):
        return x * 2

    outcomes = asyncio.run(run_in_batches([1, 2, 3], double, batch_size=2))
    assert [o.value for o in outcomes] == [2, 4, 6]


class FakeProvider:
    def __init__(self, source):
        self.source = source
        self.requested = []

    async def enrich_many(self, person_ids):
        self.requested.append(list(person_ids))
        return [
            EnrichedPerson(id=pid, source=self.source, phone_numbers=[PhoneNumber(phone_number="555")])
            for pid in person_ids
        ]


def _row(person_id, source, index=0):
    return PersonSearchResult(
        person=PersonBasic(id=f"{source}-{person_id}-1-{index}", forager_person_id=person_id, source=source),
        role=RoleInfo(),
    )


def test_mixed_selection_is_split_by_source_and_deduplicated():
    forager = FakeProvider("forager")
    aviato = FakeProvider("aviato")
    selected = [_row("1", "forager"), _row("a", "aviato"), _row("1", "forager", 1), _row("2", "forager")]

    people = asyncio.run(enrich_selection(selected, {"forager": forager, "aviato": aviato}))

    assert forager.requested == [["1", "2"]]
    assert aviato.requested == [["a"]]
    assert [(p.source, p.id) for p in people] == [("forager", "1"), ("forager", "2"), ("aviato", "a")]


def test_selection_skips_providers_with_nothing_selected():
    forager = FakeProvider("forager")
    aviato = FakeProvider("aviato")

    asyncio.run(enrich_selection([_row("a", "aviato")], {"forager": forager, "aviato": aviato}))

    assert forager.requested == []
