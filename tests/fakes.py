import json

from requests.structures import CaseInsensitiveDict


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = CaseInsensitiveDict(headers or {})
        if text is None:
            text = "" if isinstance(payload, Exception) else json.dumps(payload)
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeTwitterClient:
    """Stands in for TwitterClient; replays queued responses and records calls."""

    def __init__(self, *responses, users=None):
        self.responses = list(responses)
        self.users = users or {}
        self.calls = []

    def get_user_tweets(self, user_id, pagination_token=None):
        self.calls.append(("tweets", user_id, pagination_token))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get_user_by_username(self, username):
        self.calls.append(("lookup", username))
        return self.users[username]


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def tweets_payload(*ids, next_token=None):
    meta = {"result_count": len(ids)}
    if next_token:
        meta["next_token"] = next_token
    return {"data": [{"id": i, "text": f"tweet {i}"} for i in ids], "meta": meta}
