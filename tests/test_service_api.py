def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_books(client):
    payload = client.get("/books").json()
    assert "SCAG" in payload["available"]
    assert payload["universal"] == ["Real", "PHB"]
    assert payload["default"] == ["Real", "PHB", "SCAG"]


def test_race_options_follow_books(client):
    races = client.get("/options/races").json()
    assert races == ["Random", "Human", "Dwarf", "Elf", "Half-Elf", "Tiefling", "Dragonborn"]
    races = client.get("/options/races", params={"books": ["EBR"]}).json()
    assert "Warforged" in races
    assert "Orc" not in races


def test_unknown_collection(client):
    assert client.get("/options/spells").status_code == 404


def test_schema_lookup(client):
    response = client.get("/schemas/character")
    assert response.status_code == 200
    assert response.json()["title"] == "Generated character"
    assert client.get("/schemas/nope").status_code == 404


def test_generate_character(client):
    response = client.post("/characters", json={"seed": 7})
    assert response.status_code == 200
    payload = response.json()
    for key in ("Race", "Gender", "Name", "ShortName", "Class", "Background", "Occupation", "NPCTraits", "Life"):
        assert key in payload
    assert client.post("/characters", json={"seed": 7}).json() == payload


def test_menu_selections(client):
    payload = client.post("/characters", json={"seed": 3, "race": "Dwarf", "class": "Wizard", "gender": "Male"}).json()
    assert payload["Race"]["name"] == "Dwarf"
    assert payload["Class"]["name"] == "Wizard"
    assert payload["Gender"] == "Male"


def test_locks_keep_previous_fields(client):
    previous = client.post("/characters", json={"seed": 1}).json()
    payload = client.post(
        "/characters",
        json={"seed": 2, "previous": previous, "locks": {"race": True, "class": True}},
    ).json()
    assert payload["Race"] == previous["Race"]
    assert payload["Class"] == previous["Class"]
    assert client.post("/characters", json={"seed": 5, "previous": previous, "lock_all": True}).json() == previous


def test_unknown_selection_is_an_error_envelope(client):
    response = client.post("/characters", json={"race": "Owlbear"})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "no_eligible_entry"
    assert payload["details"] == {"selection": "Owlbear"}


def test_unknown_lock_is_rejected(client):
    assert client.post("/characters", json={"locks": {"deity": True}}).status_code == 422
    assert client.post("/darkdawn/characters", json={"locks": {"gender": True}}).status_code == 422


def test_regenerate_single_stage(client):
    previous = client.post("/characters", json={"seed": 4}).json()
    response = client.post("/characters/gender", json={"previous": previous, "gender": "Female"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["stage"] == "gender"
    assert payload["value"] == "Female"
    assert payload["character"]["Name"] == previous["Name"]


def test_stage_needs_earlier_fields(client):
    response = client.post("/characters/name", json={})
    assert response.status_code == 422
    assert response.json()["code"] == "missing_character_field"


def test_unknown_stage(client):
    assert client.post("/characters/deity", json={}).status_code == 404


def test_dark_dawn_character(client):
    response = client.post("/darkdawn/characters", json={"name": "Vex", "seed": 1})
    assert response.status_code == 200
    payload = response.json()
    assert payload["Name"] == "Vex"
    assert payload["Race"]["name"] in ("Ashborn", "Duskling")
    assert "FactionAbility" in payload
