BOOK_DESCRIPTION = "Uma história sobre livros."


def _book_payload(author_id, category_id, **extra):
    payload = {
        "title": "Outro Livro",
        "authorId": author_id,
        "categoryId": category_id,
        "description": BOOK_DESCRIPTION,
        "pdfUrl": "https://cdn.elexandria.com/outro.pdf",
    }
    payload.update(extra)
    return payload


def test_category_move_scenario(admin_client, client):
    category = admin_client.post("/api/categories", json={"name": "Ficção"})
    assert category.status_code == 201
    category = category.json()
    assert category["slug"] == "ficcao"
    assert category["iconName"] == "BookIcon"

    author = admin_client.post("/api/authors", json={"name": "Autora X"}).json()
    assert author["slug"] == "autora-x"

    book = admin_client.post("/api/books", json=_book_payload(author["id"], category["id"]))
    assert book.status_code == 201
    book = book.json()
    assert book["author"] == {"id": author["id"], "name": "Autora X", "slug": "autora-x"}
    assert book["category"]["slug"] == "ficcao"
    assert client.get(f"/api/categories/{category['id']}").json()["bookCount"] == 1

    poesia = admin_client.post("/api/categories", json={"name": "Poesia", "slug": "poesia"}).json()
    resp = admin_client.put(f"/api/books/{book['id']}", json={"categoryId": poesia["id"]})
    assert resp.status_code == 200
    assert client.get(f"/api/categories/{category['id']}").json()["bookCount"] == 0
    assert client.get(f"/api/categories/{poesia['id']}").json()["bookCount"] == 1


def test_public_reads(client, catalog):
    book = catalog["book"]
    listed = client.get("/api/books")
    assert listed.status_code == 200
    assert [b["slug"] for b in listed.json()] == [book["slug"]]

    by_slug = client.get(f"/api/books/{book['slug']}")
    assert by_slug.status_code == 200
    assert by_slug.json()["author"]["name"] == "Autora X"
    assert client.get(f"/api/books/id/{book['id']}").json()["slug"] == book["slug"]
    assert client.get("/api/books/nao-existe").status_code == 404

    assert client.get(f"/api/categories/slug/{catalog['category']['slug']}").status_code == 200
    assert client.get(f"/api/authors/slug/{catalog['author']['slug']}").json()["bookCount"] == 1
    assert len(client.get(f"/api/categories/{catalog['category']['id']}/books").json()) == 1
    assert len(client.get(f"/api/authors/{catalog['author']['id']}/books").json()) == 1


def test_book_list_filters(admin_client, client, catalog):
    author_id = catalog["author"]["id"]
    category_id = catalog["category"]["id"]
    admin_client.post(
        "/api/books",
        json=_book_payload(author_id, category_id, title="Destaque Grátis", isFeatured=True, isFree=True),
    )
    featured = client.get("/api/books", params={"featured": "true"}).json()
    assert [b["title"] for b in featured] == ["Destaque Grátis"]
    assert len(client.get("/api/books", params={"category": category_id}).json()) == 2
    assert len(client.get("/api/books", params={"limit": 1}).json()) == 1
    assert [b["slug"] for b in client.get("/api/books", params={"search": "livro"}).json()] == ["o-livro"]
    assert client.get("/api/books", params={"limit": 0}).status_code == 400


def test_admin_mutations_require_admin(client, user_client, catalog):
    book_id = catalog["book"]["id"]
    category_id = catalog["category"]["id"]
    cases = [
        ("post", "/api/categories", {"name": "Nova Categoria"}),
        ("put", f"/api/categories/{category_id}", {"name": "Renomeada"}),
        ("delete", f"/api/categories/{category_id}", None),
        ("post", "/api/authors", {"name": "Novo Autor"}),
        ("post", "/api/series", {"name": "Saga", "authorId": 1}),
        ("post", "/api/books", {"title": "x"}),
        ("put", f"/api/books/{book_id}", {"title": "Novo título"}),
        ("delete", f"/api/books/{book_id}", None),
        ("put", "/api/settings", {"siteName": "Outro"}),
        ("get", "/api/admin/comments", None),
        ("post", "/api/admin/comments/1/approve", None),
        ("delete", "/api/admin/comments/1", None),
        ("get", "/api/admin/users", None),
    ]
    for method, url, body in cases:
        kwargs = {"json": body} if body is not None else {}
        anon = getattr(client, method)(url, **kwargs)
        assert anon.status_code == 401, (method, url, anon.text)
        forbidden = getattr(user_client, method)(url, **kwargs)
        assert forbidden.status_code == 403, (method, url, forbidden.text)

    # nothing changed
    assert client.get(f"/api/books/id/{book_id}").json()["title"] == "O Livro"


def test_delete_guards(admin_client, client, catalog):
    category_id = catalog["category"]["id"]
    author_id = catalog["author"]["id"]
    resp = admin_client.delete(f"/api/categories/{category_id}")
    assert resp.status_code == 409
    assert resp.json()["message"]
    assert admin_client.delete(f"/api/authors/{author_id}").status_code == 409

    assert admin_client.delete(f"/api/books/{catalog['book']['id']}").status_code == 204
    assert admin_client.delete(f"/api/categories/{category_id}").status_code == 204
    assert admin_client.delete(f"/api/authors/{author_id}").status_code == 204
    assert client.get(f"/api/categories/{category_id}").status_code == 404


def test_duplicate_slugs_conflict(admin_client, catalog):
    resp = admin_client.post("/api/categories", json={"name": "Ficção"})
    assert resp.status_code == 409
    assert resp.json()["field"] == "slug"
    resp = admin_client.post(
        "/api/books",
        json=_book_payload(catalog["author"]["id"], catalog["category"]["id"], slug="o-livro"),
    )
    assert resp.status_code == 409


def test_book_validation(admin_client, catalog):
    author_id = catalog["author"]["id"]
    category_id = catalog["category"]["id"]

    resp = admin_client.post(
        "/api/books",
        json=_book_payload(author_id, category_id, description="curta", coverUrl="not a url", format="mobi"),
    )
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"description", "coverUrl", "format"} <= fields

    no_files = _book_payload(author_id, category_id, title="Sem Arquivos")
    no_files.pop("pdfUrl")
    resp = admin_client.post("/api/books", json=no_files)
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "epubUrl"

    resp = admin_client.post("/api/books", json=_book_payload(author_id, 999, title="Sem Categoria"))
    assert resp.status_code == 404

    # empty optional URL means absent
    resp = admin_client.post(
        "/api/books", json=_book_payload(author_id, category_id, title="Com Capa Vazia", coverUrl="")
    )
    assert resp.status_code == 201
    assert resp.json()["coverUrl"] is None


def test_category_and_author_validation(admin_client):
    resp = admin_client.post("/api/categories", json={"name": "ab", "slug": "Com Espaço"})
    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"name", "slug"}
    resp = admin_client.post("/api/authors", json={"name": "Autor", "photoUrl": "ftp://x"})
    assert resp.status_code == 400


def test_update_book_partial(admin_client, catalog):
    book = catalog["book"]
    resp = admin_client.put(f"/api/books/{book['id']}", json={"isFeatured": True, "publisher": "Editora"})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["isFeatured"] is True
    assert updated["publisher"] == "Editora"
    assert updated["title"] == book["title"]
    assert admin_client.put("/api/books/999", json={"title": "Fantasma"}).status_code == 404


def test_increment_downloads(client, catalog):
    book_id = catalog["book"]["id"]
    for _ in range(3):
        assert client.post(f"/api/books/{book_id}/increment-downloads").status_code == 200
    assert client.get(f"/api/books/id/{book_id}").json()["downloadCount"] == 3
    assert client.post("/api/books/999/increment-downloads").status_code == 404


def test_series_lifecycle(admin_client, client, catalog):
    author_id = catalog["author"]["id"]
    series = admin_client.post("/api/series", json={"name": "A Saga", "authorId": author_id})
    assert series.status_code == 201
    series = series.json()
    assert series["slug"] == "a-saga"
    assert series["author"]["slug"] == "autora-x"

    book_id = catalog["book"]["id"]
    admin_client.put(f"/api/books/{book_id}", json={"seriesId": series["id"], "volumeNumber": 1})
    admin_client.post(
        "/api/books",
        json=_book_payload(author_id, catalog["category"]["id"], seriesId=series["id"], volumeNumber=2),
    )
    detail = client.get(f"/api/series/{series['id']}").json()
    assert detail["totalBooks"] == 2
    assert [b["volumeNumber"] for b in detail["books"]] == [1, 2]
    assert [s["id"] for s in client.get(f"/api/authors/{author_id}/series").json()] == [series["id"]]

    resp = admin_client.delete(f"/api/series/{series['id']}")
    assert resp.status_code == 200
    assert resp.json()["detachedBooks"] == 2
    book = client.get(f"/api/books/id/{book_id}").json()
    assert book["seriesId"] is None
    assert book["volumeNumber"] is None
    assert client.get(f"/api/series/{series['id']}").status_code == 404


def test_series_requires_existing_author(admin_client):
    resp = admin_client.post("/api/series", json={"name": "Órfã", "authorId": 999})
    assert resp.status_code == 404
