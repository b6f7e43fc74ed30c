from __future__ import annotations


def render_homepage() -> str:
    return """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Task Tracker</title>
  <link rel="preconnect" href="https://fonts.googleapis.com">
  <link rel="preconnect" href="https://fonts.gstatic.com" crossorigin>
  <link
    href="https://fonts.googleapis.com/css2?family=Space+Grotesk:wght@400;500;700&display=swap"
    rel="stylesheet"
  >
  <style>
    :root {
      --bg: #f3efe6;
      --panel: #fffaf0;
      --ink: #112433;
      --muted: #5c6b74;
      --accent: #0f8b8d;
      --line: #d7d1c3;
      --warn: #b00020;
    }
    * { box-sizing: border-box; }
    body {
      margin: 0;
      min-height: 100vh;
      font-family: "Space Grotesk", sans-serif;
      color: var(--ink);
      background:
        radial-gradient(circle at 10% 10%, #b6e3df 0%, transparent 45%),
        radial-gradient(circle at 90% 85%, #ffd3a8 0%, transparent 42%),
        var(--bg);
    }
    .wrap {
      max-width: 560px;
      margin: 40px auto;
      padding: 24px;
      background: color-mix(in srgb, var(--panel) 88%, white 12%);
      border: 1px solid var(--line);
      border-radius: 16px;
      box-shadow: 0 8px 22px rgba(17, 36, 51, 0.08);
    }
    h1 { margin: 0 0 18px; text-align: center; font-size: 1.6rem; }
    ul { list-style: none; margin: 0 0 18px; padding: 0; display: grid; gap: 8px; }
    li {
      display: flex;
      align-items: center;
      gap: 10px;
      padding: 10px 12px;
      border: 1px solid var(--line);
      border-radius: 12px;
      background: #fff;
    }
    li .title { flex: 1; }
    li.done .title { text-decoration: line-through; color: var(--muted); }
    li .meta { font-size: 0.75rem; color: var(--muted); }
    .row { display: flex; gap: 10px; }
    input[type="text"] {
      flex: 1;
      border: 1px solid var(--line);
      border-radius: 12px;
      padding: 10px 12px;
      font: inherit;
    }
    button {
      border: none;
      border-radius: 10px;
      padding: 10px 14px;
      font-family: "Space Grotesk", sans-serif;
      font-weight: 700;
      cursor: pointer;
    }
    button:disabled { opacity: 0.5; cursor: not-allowed; }
    .primary { background: var(--accent); color: #fff; }
    .danger { background: #ffe8ec; color: var(--warn); padding: 6px 10px; }
    .status { margin: 0 0 12px; color: var(--muted); }
    .error {
      display: flex;
      justify-content: space-between;
      align-items: center;
      margin: 0 0 12px;
      padding: 8px 12px;
      border-radius: 10px;
      background: #ffe8ec;
      color: var(--warn);
    }
  </style>
</head>
<body>
  <main class="wrap">
    <h1>Task Tracker</h1>
    <p class="status" id="loadingText" hidden>Loading tasks...</p>
    <div class="error" id="errorBox" hidden>
      <span id="errorText"></span>
      <button class="danger" id="dismissBtn" type="button">Dismiss</button>
    </div>
    <ul id="taskList"></ul>
    <form class="row" id="addForm">
      <input type="text" id="draftInput" placeholder="Add a new task..." autocomplete="off">
      <button class="primary" id="addBtn" type="submit">Add</button>
    </form>
  </main>

  <script>
    // Single state object; render() is a pure projection of it.
    const state = { tasks: [], pendingInput: "", loading: false, error: null };

    const taskList = document.getElementById("taskList");
    const draftInput = document.getElementById("draftInput");
    const addBtn = document.getElementById("addBtn");
    const loadingText = document.getElementById("loadingText");
    const errorBox = document.getElementById("errorBox");
    const errorText = document.getElementById("errorText");

    function describeError(data, status) {
      if (status === 404) {
        return "Task not found.";
      }
      if (status === 422 && data && typeof data === "object") {
        return Object.entries(data)
          .map(([field, messages]) => `${field} ${[].concat(messages).join(", ")}`)
          .join("; ");
      }
      return `Request failed with HTTP ${status}.`;
    }

    async function request(url, method = "GET", body = undefined) {
      const options = { method, headers: { Accept: "application/json" } };
      if (body !== undefined) {
        options.headers["Content-Type"] = "application/json";
        options.body = JSON.stringify(body);
      }
      const response = await fetch(url, options);
      const text = await response.text();
      const data = text ? JSON.parse(text) : null;
      if (!response.ok) {
        throw new Error(describeError(data, response.status));
      }
      return data;
    }

    function setState(changes) {
      Object.assign(state, changes);
      render();
    }

    function fail(err) {
      setState({ error: String(err.message || err) });
    }

    async function mount() {
      setState({ loading: true });
      try {
        const tasks = await request("/api/tasks");
        setState({ tasks, loading: false, error: null });
      } catch (err) {
        setState({ loading: false, error: String(err.message || err) });
      }
    }

    async function addTask() {
      const draft = state.pendingInput;
      if (draft.trim() === "") {
        return;
      }
      try {
        const created = await request("/api/tasks", "POST", { task: { title: draft } });
        setState({ tasks: [created, ...state.tasks], pendingInput: "", error: null });
      } catch (err) {
        fail(err);
      }
    }

    async function toggleTask(task) {
      try {
        const updated = await request(`/api/tasks/${task.id}`, "PATCH", {
          task: { completed: !task.completed },
        });
        setState({
          tasks: state.tasks.map((item) => (item.id === updated.id ? updated : item)),
          error: null,
        });
      } catch (err) {
        fail(err);
      }
    }

    async function deleteTask(task) {
      try {
        await request(`/api/tasks/${task.id}`, "DELETE");
        setState({ tasks: state.tasks.filter((item) => item.id !== task.id), error: null });
      } catch (err) {
        fail(err);
      }
    }

    function renderTask(task) {
      const item = document.createElement("li");
      item.classList.toggle("done", task.completed);

      const checkbox = document.createElement("input");
      checkbox.type = "checkbox";
      checkbox.checked = task.completed;
      checkbox.addEventListener("change", (event) => {
        // Keep the box in sync with acknowledged state until the server answers.
        event.target.checked = task.completed;
        toggleTask(task);
      });

      const title = document.createElement("span");
      title.className = "title";
      title.textContent = task.title;

      const meta = document.createElement("span");
      meta.className = "meta";
      meta.textContent = new Date(task.created_at).toLocaleString();

      const remove = document.createElement("button");
      remove.type = "button";
      remove.className = "danger";
      remove.textContent = "Delete";
      remove.addEventListener("click", () => deleteTask(task));

      item.append(checkbox, title, meta, remove);
      return item;
    }

    function render() {
      loadingText.hidden = !state.loading;
      errorBox.hidden = !state.error;
      errorText.textContent = state.error || "";
      taskList.replaceChildren(...state.tasks.map(renderTask));
      if (draftInput.value !== state.pendingInput) {
        draftInput.value = state.pendingInput;
      }
      addBtn.disabled = state.pendingInput.trim() === "";
    }

    draftInput.addEventListener("input", (event) => {
      setState({ pendingInput: event.target.value });
    });
    document.getElementById("addForm").addEventListener("submit", (event) => {
      event.preventDefault();
      addTask();
    });
    document.getElementById("dismissBtn").addEventListener("click", () => {
      setState({ error: null });
    });

    mount();
  </script>
</body>
</html>
"""
