"""Unit tests for the inquiry, quote, contact and catalog services."""
from unittest.mock import MagicMock

import httpx
import pytest
from bson import ObjectId

from app.config.settings import settings
from core.errors import ConflictError, NotFoundError, TooManyRequestsError, ValidationError
from domain.schemas.category import CategoryCreate, CategoryUpdate
from domain.schemas.contact import ContactCreate
from domain.schemas.inquiry import InquiryCreate, InquiryMessageCreate
from domain.schemas.product import ProductCreate
from domain.schemas.quote import QuoteCreate
from infrastructure.external.file_storage import FileStorage
from services import categories, contact, inquiries, products, quotes


class TestInquiryService:
    def test_create_looks_up_products(self, db, buyer) -> None:
        product_id = ObjectId()
        db.products.find.return_value = [
            {"_id": product_id, "name": "Black Pepper", "priceRange": {"min": 6, "max": 8.2, "currency": "EUR"}},
        ]
        db.inquiries.insert_one.return_value.inserted_id = ObjectId()
        db.users.find.return_value = []

        data = InquiryCreate.model_validate({"items": [{"productId": str(product_id), "quantity": 100}]})
        response = inquiries.create_inquiry(db, buyer, data)

        assert db.products.find.call_args[0][0] == {"_id": {"$in": [product_id]}}
        assert response.items[0].name == "Black Pepper"
        assert response.status == "open"

    def test_create_with_malformed_product_id(self, db, buyer) -> None:
        data = InquiryCreate.model_validate({"items": [{"productId": "nope", "quantity": 1}]})
        with pytest.raises(NotFoundError):
            inquiries.create_inquiry(db, buyer, data)

    def test_message_saved_with_version(self, db, buyer) -> None:
        inquiry_id = ObjectId()
        db.inquiries.find_one.return_value = {
            "_id": inquiry_id, "userId": buyer.id, "status": "open", "version": 3, "messages": [],
            "items": [{"productId": str(ObjectId()), "name": "Rice", "quantity": 1, "priceRange": {"min": 1}}],
        }
        db.inquiries.replace_one.return_value.matched_count = 1
        inquiries.post_message(db, str(inquiry_id), buyer, InquiryMessageCreate(body="x", price_proposal=1.2))

        query, document = db.inquiries.replace_one.call_args[0]
        assert query == {"_id": inquiry_id, "version": 3}
        assert document["version"] == 4
        assert document["status"] == "negotiating"

        db.inquiries.replace_one.return_value.matched_count = 0
        with pytest.raises(ConflictError):
            inquiries.post_message(db, str(inquiry_id), buyer, InquiryMessageCreate(body="again"))


class TestQuoteService:
    def test_unknown_product(self, db) -> None:
        db.products.find_one.return_value = None
        data = QuoteCreate.model_validate({"name": "Ana", "email": "ANA@x.io", "productId": str(ObjectId())})
        with pytest.raises(NotFoundError):
            quotes.create_quote(db, data)

    def test_create(self, db) -> None:
        product_id = str(ObjectId())
        db.products.find_one.return_value = {"_id": ObjectId(product_id)}
        db.product_quotes.insert_one.return_value.inserted_id = ObjectId()
        quote = quotes.create_quote(db, QuoteCreate.model_validate(
            {"name": "Ana", "email": "ANA@x.io", "productId": product_id}
        ))
        stored = db.product_quotes.insert_one.call_args[0][0]
        assert stored["email"] == "ana@x.io"
        assert stored["status"] == "new"
        assert quote.product_id == product_id


class TestContactService:
    def _form(self, **extra) -> ContactCreate:
        return ContactCreate.model_validate({"name": "Ana", "email": "ana@x.io", "message": "Need 2t", **extra})

    def test_honeypot(self, db) -> None:
        with pytest.raises(ValidationError) as exc:
            contact.submit_contact(db, self._form(hp="http://spam"), "1.2.3.4")
        assert exc.value.detail == "Bad request"
        db.contact_messages.insert_one.assert_not_called()

    def test_hourly_limit(self, db) -> None:
        db.contact_messages.count_documents.return_value = settings.CONTACT_HOURLY_LIMIT
        with pytest.raises(TooManyRequestsError):
            contact.submit_contact(db, self._form(), "1.2.3.4")

    def test_stores_ip_and_agent(self, db) -> None:
        db.contact_messages.count_documents.return_value = 0
        db.contact_messages.insert_one.return_value.inserted_id = ObjectId()
        contact.submit_contact(db, self._form(), "1.2.3.4", "curl/8")
        stored = db.contact_messages.insert_one.call_args[0][0]
        assert stored["ip"] == "1.2.3.4"
        assert stored["userAgent"] == "curl/8"
        assert "hp" not in stored

    def _verifier(self, monkeypatch, answer=None, error=None) -> MagicMock:
        monkeypatch.setattr(settings, "HCAPTCHA_SECRET", "0xsecret")
        post = MagicMock(side_effect=error)
        post.return_value.json.return_value = answer
        monkeypatch.setattr(contact.httpx, "post", post)
        return post

    def test_captcha_accepted(self, db, monkeypatch) -> None:
        post = self._verifier(monkeypatch, answer={"success": True})
        db.contact_messages.count_documents.return_value = 0
        db.contact_messages.insert_one.return_value.inserted_id = ObjectId()
        contact.submit_contact(db, self._form(hcaptchaToken="tok"), "1.2.3.4")

        assert post.call_args.kwargs["data"] == {"secret": "0xsecret", "response": "tok", "remoteip": "1.2.3.4"}
        assert "hcaptchaToken" not in db.contact_messages.insert_one.call_args[0][0]

    def test_captcha_failed(self, db, monkeypatch) -> None:
        self._verifier(monkeypatch, answer={"success": False})
        db.contact_messages.count_documents.return_value = 0
        with pytest.raises(ValidationError) as exc:
            contact.submit_contact(db, self._form(hcaptchaToken="tok"), "1.2.3.4")
        assert exc.value.detail == "Captcha verification failed"
        db.contact_messages.insert_one.assert_not_called()

    def test_captcha_verifier_down_is_not_fatal(self, db, monkeypatch) -> None:
        self._verifier(monkeypatch, error=httpx.ConnectError("unreachable"))
        db.contact_messages.count_documents.return_value = 0
        db.contact_messages.insert_one.return_value.inserted_id = ObjectId()
        contact.submit_contact(db, self._form(hcaptchaToken="tok"), "1.2.3.4")
        db.contact_messages.insert_one.assert_called_once()

    def test_captcha_skipped_without_secret(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "HCAPTCHA_SECRET", None)
        post = MagicMock()
        monkeypatch.setattr(contact.httpx, "post", post)
        assert contact.verify_captcha("tok", "1.2.3.4") is True
        post.assert_not_called()

    def test_client_ip(self) -> None:
        assert contact.client_ip("9.9.9.9, 10.0.0.1", "127.0.0.1") == "9.9.9.9"
        assert contact.client_ip(None, "127.0.0.1") == "127.0.0.1"


class TestCatalogServices:
    def test_category_slug_from_name(self, db) -> None:
        db.categories.insert_one.return_value.inserted_id = ObjectId()
        category = categories.create_category(db, CategoryCreate(name=" Dried Fruit "))
        assert category.slug == "dried-fruit"
        assert db.categories.insert_one.call_args[0][0]["name"] == "Dried Fruit"

    def test_category_update_needs_fields(self, db) -> None:
        with pytest.raises(ValidationError):
            categories.update_category(db, str(ObjectId()), CategoryUpdate())

    def test_category_update_missing(self, db) -> None:
        db.categories.find_one_and_update.return_value = None
        with pytest.raises(NotFoundError):
            categories.update_category(db, str(ObjectId()), CategoryUpdate(order=3))

    def test_product_defaults(self, db) -> None:
        db.products.insert_one.return_value.inserted_id = ObjectId()
        product = products.create_product(db, ProductCreate.model_validate(
            {"name": "Green Tea", "priceRange": {"min": 4, "max": 6}}
        ))
        stored = db.products.insert_one.call_args[0][0]
        assert product.slug == "green-tea"
        assert stored["priceRange"] == {"min": 4, "max": 6, "currency": "EUR"}
        assert stored["unit"] == "per kg"

    def test_product_search_query(self, db) -> None:
        db.products.find.return_value.sort.return_value = []
        products.list_products(db, q="pepper", category="Spices")
        assert db.products.find.call_args[0][0] == {"$text": {"$search": "pepper"}, "category": "Spices"}


class TestFileStorage:
    def test_save_bytes_writes_random_name(self, tmp_path) -> None:
        storage = FileStorage(upload_dir=str(tmp_path / "images"))
        first = storage.save_bytes(b"\x89PNG", ".png")
        second = storage.save_bytes(b"\x89PNG", ".png")
        assert first != second
        assert (tmp_path / "images" / first).read_bytes() == b"\x89PNG"
        assert FileStorage.public_url(first) == f"/uploads/{first}"
