"""In-memory stand-ins for the async OpenAI client used by the pipeline."""

from types import SimpleNamespace


DEFAULT_JUDGE_REPLY = (
    "Context Score: 80\n"
    "Technical Score: 100\n"
    "Clarity Score: 70\n"
    "Final Score: 250\n"
    "Justification: On theme and easy to follow."
)


def completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(role='assistant', content=text))])


def text_message(text):
    return SimpleNamespace(role='assistant', content=[SimpleNamespace(type='text', text=SimpleNamespace(value=text))])


class FakeCompletions:
    def __init__(self, owner):
        self.owner = owner
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        prompt = kwargs['messages'][0]['content']
        result = self.owner.answer_fn(prompt)
        if isinstance(result, Exception):
            raise result
        if result is None:
            return SimpleNamespace(choices=[])
        return completion(result)


class FakeMessages:
    def __init__(self, owner):
        self.owner = owner
        self.posted = {}

    async def create(self, thread_id, **kwargs):
        self.posted[thread_id] = kwargs['content']
        return SimpleNamespace(id=f"msg_{thread_id}", thread_id=thread_id)

    async def list(self, thread_id, **kwargs):
        reply = self.owner.judge_reply_fn(self.posted.get(thread_id, ''))
        if reply is None:
            return SimpleNamespace(data=[])
        if isinstance(reply, str):
            return SimpleNamespace(data=[text_message(reply)])
        # A raw list of content blocks
        return SimpleNamespace(data=[SimpleNamespace(role='assistant', content=reply)])


class FakeRuns:
    def __init__(self, owner):
        self.owner = owner
        self.pending = {}
        self.retrieve_calls = 0
        self.created = []

    async def create(self, thread_id, **kwargs):
        run_id = f"run_{thread_id}"
        self.created.append((thread_id, kwargs.get('assistant_id')))
        self.pending[run_id] = list(self.owner.run_statuses)
        return SimpleNamespace(id=run_id, thread_id=thread_id, status='queued')

    async def retrieve(self, run_id, **kwargs):
        self.retrieve_calls += 1
        queue = self.pending[run_id]
        item = queue.pop(0) if queue else 'completed'
        if isinstance(item, Exception):
            raise item
        if isinstance(item, tuple):
            status, message = item
            return SimpleNamespace(id=run_id, status=status, last_error=SimpleNamespace(message=message))
        return SimpleNamespace(id=run_id, status=item, last_error=None)


class FakeThreads:
    def __init__(self, owner):
        self.owner = owner
        self.messages = FakeMessages(owner)
        self.runs = FakeRuns(owner)
        self.created = []
        self.deleted = []
        self.delete_error = None

    async def create(self, **kwargs):
        thread_id = f"thread_{len(self.created) + 1}"
        self.created.append(kwargs)
        return SimpleNamespace(id=thread_id)

    async def delete(self, thread_id):
        self.deleted.append(thread_id)
        if self.delete_error is not None:
            raise self.delete_error
        return SimpleNamespace(id=thread_id, deleted=True)


class FakeAIClient:
    """Mimics the slice of ``AsyncOpenAI`` the pipeline touches.

    ``answer_fn(prompt)`` returns answer text, ``None`` for an empty choice
    list, or an exception to raise. ``judge_reply_fn(message)`` returns the
    judge's reply text, ``None`` for no messages, or a list of content
    blocks. ``run_statuses`` is replayed for every run.
    """

    def __init__(self, answer_fn=None, judge_reply_fn=None, run_statuses=None):
        self.answer_fn = answer_fn or (lambda prompt: 'A short, confident answer.')
        self.judge_reply_fn = judge_reply_fn or (lambda message: DEFAULT_JUDGE_REPLY)
        self.run_statuses = run_statuses if run_statuses is not None else ['in_progress', 'completed']
        self.chat = SimpleNamespace(completions=FakeCompletions(self))
        self.beta = SimpleNamespace(threads=FakeThreads(self))
        self.closed = 0

    @property
    def threads(self):
        return self.beta.threads

    async def close(self):
        self.closed += 1
