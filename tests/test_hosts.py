"""Tests for the in-memory host and the file sources."""

import asyncio
import json

import httpx
import pytest

from tome_sync.hosts import HttpFileProbe, LocalFileSource, MemoryWorld, merge_update, set_property
from tome_sync.hosts.notify import CollectingNotifier
from tome_sync.models import Actor, Folder


class TestPartialUpdates:
    """Test dotted-path partial update semantics."""

    def test_set_property_creates_path(self):
        doc = {}
        set_property(doc, "prototypeToken.texture.src", "a.png")
        assert doc == {"prototypeToken": {"texture": {"src": "a.png"}}}

    def test_dotted_key_keeps_siblings(self):
        doc = {"prototypeToken": {"actorLink": False, "texture": {"src": "old.png", "scale": 2}}}
        merge_update(doc, {"prototypeToken.texture.src": "new.png"})
        assert doc["prototypeToken"] == {"actorLink": False, "texture": {"src": "new.png", "scale": 2}}

    def test_nested_dict_merges(self):
        doc = {"system": {"details": {"race": "Elf", "age": 120}}}
        merge_update(doc, {"system": {"details": {"race": "Human"}}})
        assert doc["system"]["details"] == {"race": "Human", "age": 120}

    def test_none_replaces(self):
        doc = {"img": "a.png"}
        merge_update(doc, {"img": None})
        assert doc["img"] is None


class TestMemoryWorld:
    """Test the in-memory actor and folder stores."""

    @pytest.mark.asyncio
    async def test_create_assigns_ids(self):
        world = MemoryWorld()
        created = await world.actors.create_batch([{"name": "Mira", "folder": "tome"}])
        assert len(created) == 1
        assert len(created[0].id) == 16
        assert world.actors.find(lambda a: a.name == "Mira") == created

    @pytest.mark.asyncio
    async def test_update_batch(self):
        world = MemoryWorld()
        world.actors.add(Actor(id="a1", name="Mira", prototype_token={"actorLink": False, "width": 1}))
        updated = await world.actors.update_batch([
            {"_id": "a1", "prototypeToken.actorLink": True},
            {"_id": "missing", "name": "Ghost"},
        ])
        assert [a.id for a in updated] == ["a1"]
        assert world.actors.get("a1").prototype_token == {"actorLink": True, "width": 1}

    @pytest.mark.asyncio
    async def test_folder_create(self):
        world = MemoryWorld()
        folder = await world.folders.create("Tome", "Actor")
        assert world.folders.get(folder.id) == folder
        assert folder.parent is None

    def test_snapshot_round_trip(self, tmp_path):
        world = MemoryWorld()
        world.folders.add(Folder(id="f1", name="NPCs"))
        world.actors.add(Actor(id="a1", name="Mira", folder="f1", img="mira.png"))
        path = tmp_path / "world.json"
        world.save(path)

        loaded = MemoryWorld.load(path)
        assert loaded.actors.get("a1").img == "mira.png"
        assert loaded.folders.get("f1").name == "NPCs"

    @pytest.mark.asyncio
    async def test_snapshot_keeps_unmodeled_fields(self, tmp_path):
        """Host fields the models don't declare survive load, update and save."""
        data = {
            "folders": [
                {"_id": "f1", "name": "NPCs", "type": "Actor", "folder": None, "color": "#fff", "sort": 5},
                {"_id": "f2", "name": "Town", "type": "Actor", "folder": "f1", "sorting": "a"},
            ],
            "actors": [
                {
                    "_id": "a1", "name": "Mira", "folder": "f2",
                    "items": [{"name": "Sword"}], "effects": [], "sort": 10,
                    "_stats": {"coreVersion": "12"},
                    "prototypeToken": {"actorLink": False, "texture": {"src": "old.png", "scaleX": 1}},
                },
                {"_id": "a2", "name": "Bran", "folder": "f1", "items": [{"name": "Bow"}]},
            ],
        }
        path = tmp_path / "world.json"
        path.write_text(json.dumps(data), encoding="utf-8")

        world = MemoryWorld.load(path)
        assert world.folders.get("f2").parent == "f1"
        await world.actors.update_batch([{"_id": "a1", "prototypeToken.texture.src": "new.png"}])
        world.save(path)

        saved = json.loads(path.read_text(encoding="utf-8"))
        actors = {a["_id"]: a for a in saved["actors"]}
        folders = {f["_id"]: f for f in saved["folders"]}
        assert actors["a1"]["items"] == [{"name": "Sword"}]
        assert actors["a1"]["effects"] == []
        assert actors["a1"]["sort"] == 10
        assert actors["a1"]["_stats"] == {"coreVersion": "12"}
        assert actors["a1"]["prototypeToken"]["texture"] == {"src": "new.png", "scaleX": 1}
        assert actors["a2"]["items"] == [{"name": "Bow"}]
        assert folders["f1"]["color"] == "#fff"
        assert folders["f1"]["sort"] == 5
        assert folders["f2"]["folder"] == "f1"
        assert folders["f2"]["sorting"] == "a"

    def test_parent_accepted_under_either_key(self):
        assert Folder.model_validate({"_id": "f", "name": "F", "parent": "p"}).parent == "p"
        assert Folder.model_validate({"_id": "f", "name": "F", "folder": "p"}).parent == "p"

    def test_load_missing_snapshot(self, tmp_path):
        world = MemoryWorld.load(tmp_path / "nope.json")
        assert world.actors.find(lambda a: True) == []


class TestLocalFileSource:
    """Test local probing and browsing."""

    @pytest.fixture
    def data_root(self, tmp_path):
        images = tmp_path / "assets" / "chars"
        (images / "sub").mkdir(parents=True)
        (images / "mira.png").write_bytes(b"png")
        (images / "sub" / "mira token.png").write_bytes(b"png")
        return tmp_path

    @pytest.mark.asyncio
    async def test_exists(self, data_root):
        source = LocalFileSource(data_root)
        assert await source.exists("assets/chars/mira.png")
        assert not await source.exists("assets/chars/bran.png")
        assert not await source.exists("assets/chars")

    @pytest.mark.asyncio
    async def test_exists_outside_root(self, data_root):
        source = LocalFileSource(data_root / "assets")
        assert not await source.exists("../../etc/passwd")

    @pytest.mark.asyncio
    async def test_browse_recursive(self, data_root):
        result = await LocalFileSource(data_root).browse("assets/chars")
        assert result.path == "assets/chars"
        assert result.files == ["assets/chars/mira.png", "assets/chars/sub/mira token.png"]

    @pytest.mark.asyncio
    async def test_browse_missing(self, data_root):
        with pytest.raises(FileNotFoundError):
            await LocalFileSource(data_root).browse("nowhere")


class TestHttpFileProbe:
    """Test HEAD-request probing."""

    @staticmethod
    def _client(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_exists_on_success(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url)))
            return httpx.Response(200 if request.url.path.endswith("mira.png") else 404)

        async with self._client(handler) as client:
            probe = HttpFileProbe("http://host/data/", client=client)
            assert await probe.exists("assets/mira.png")
            assert not await probe.exists("assets/bran.png")
        assert seen[0] == ("HEAD", "http://host/data/assets/mira.png")

    @pytest.mark.asyncio
    async def test_transport_error_is_miss(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with self._client(handler) as client:
            probe = HttpFileProbe("http://host", client=client)
            assert not await probe.exists("mira.png")

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_capped(self):
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200)

        async with self._client(handler) as client:
            probe = HttpFileProbe("http://host", client=client, max_concurrency=2)
            results = await asyncio.gather(*(probe.exists(f"img/{i}.png") for i in range(6)))
        assert all(results)
        assert peak == 2

    @pytest.mark.asyncio
    async def test_owned_client_is_reused(self):
        probe = HttpFileProbe("http://host")
        client = probe._client
        await probe.aclose()
        assert client.is_closed
        assert probe._client is client

    @pytest.mark.asyncio
    async def test_shared_client_left_open(self):
        async with self._client(lambda request: httpx.Response(200)) as client:
            probe = HttpFileProbe("http://host", client=client)
            await probe.aclose()
            assert not client.is_closed


class TestCollectingNotifier:
    def test_collects_in_order(self):
        notifier = CollectingNotifier()
        notifier.info("one")
        notifier.warn("two")
        notifier.error("three")
        assert notifier.messages == [("info", "one"), ("warn", "two"), ("error", "three")]
        assert notifier.render() == "one\ntwo\nthree"
