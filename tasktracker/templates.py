from __future__ import annotations

import json
from html import escape


def render_app_page(*, api_url: str = "", delete_delay_ms: int = 300) -> str:
    """
    Render the single-page task list UI.

    ``api_url`` is the base URL the page calls; an empty string means the
    page talks to the server that delivered it.
    """
    config_json = escape(
        json.dumps({"apiUrl": api_url.rstrip("/"), "deleteDelay": delete_delay_ms})
    )
    scripts = _app_script()
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Task Manager</title>
  <style>
    :root {{
      color-scheme: dark;
      --bg: #121212;
      --panel-bg: #1f1f1f;
      --row-bg: #2a2a2a;
      --row-muted: #333;
      --accent: #64ffda;
      --danger: #ff4c4c;
      --muted: #888;
      font-family: "Segoe UI", Tahoma, Geneva, Verdana, sans-serif;
    }}
    body {{
      margin: 0;
      background: var(--bg);
      color: #fff;
    }}
    main {{
      max-width: 600px;
      margin: 2rem auto;
      padding: 2rem;
      background: var(--panel-bg);
      border-radius: 12px;
    }}
    h1 {{
      text-align: center;
      color: var(--accent);
    }}
    form.add {{
      display: flex;
      margin-bottom: 1rem;
    }}
    form.add input {{
      flex: 1;
      padding: 0.75rem 1rem;
      border: none;
      border-radius: 8px 0 0 8px;
    }}
    button {{
      border: none;
      border-radius: 6px;
      cursor: pointer;
      padding: 0.25rem 0.75rem;
      background: var(--accent);
      color: var(--panel-bg);
    }}
    button.danger {{
      background: var(--danger);
      color: #fff;
    }}
    .filters {{
      text-align: center;
      margin-bottom: 1rem;
    }}
    .filters button {{
      background: transparent;
      border: 1px solid var(--accent);
      color: #fff;
    }}
    .filters button[aria-pressed="true"] {{
      background: var(--accent);
      color: var(--panel-bg);
      font-weight: bold;
    }}
    .summary, .empty {{
      text-align: center;
      color: #ccc;
    }}
    ul.tasks {{
      list-style: none;
      padding: 0;
    }}
    ul.tasks li {{
      display: flex;
      align-items: center;
      justify-content: space-between;
      gap: 0.5rem;
      margin-bottom: 0.5rem;
      padding: 0.5rem 1rem;
      border-radius: 8px;
      background: var(--row-bg);
      transition: all 0.3s;
    }}
    ul.tasks li.completed {{
      background: var(--row-muted);
    }}
    ul.tasks li.completed .title {{
      text-decoration: line-through;
      color: var(--muted);
    }}
    ul.tasks li.deleting {{
      opacity: 0.5;
    }}
    .title {{
      flex: 1;
      cursor: pointer;
    }}
  </style>
</head>
<body>
  <main id="app" data-config="{config_json}">
    <h1>Task Manager</h1>
    <form class="add" id="add-form">
      <input type="text" name="title" id="new-title" placeholder="New task" autocomplete="off" />
      <button type="submit">Add</button>
    </form>
    <div class="filters" id="filters">
      <button type="button" data-filter="all" aria-pressed="true">All</button>
      <button type="button" data-filter="active" aria-pressed="false">Active</button>
      <button type="button" data-filter="completed" aria-pressed="false">Completed</button>
    </div>
    <p class="summary" id="summary"></p>
    <div id="task-list"></div>
  </main>
  {scripts}
</body>
</html>
"""


def _app_script() -> str:
    return """
    <script>
      (function(){
        const root = document.getElementById('app');
        const config = JSON.parse(root.dataset.config || '{}');
        const apiUrl = config.apiUrl || '';
        const deleteDelay = Number(config.deleteDelay || 300);
        const addForm = document.getElementById('add-form');
        const newTitleInput = document.getElementById('new-title');
        const filterBar = document.getElementById('filters');
        const summary = document.getElementById('summary');
        const listContainer = document.getElementById('task-list');

        const state = {
          tasks: [],
          filter: 'all',
          editingId: null,
          editingTitle: '',
          deletingId: null,
          loading: false,
        };

        async function handleResponse(response){
          if (!response.ok) {
            const message = await response.text();
            throw new Error(message || 'API error');
          }
          return response.json();
        }

        const api = {
          async list(){
            return handleResponse(await fetch(apiUrl + '/tasks'));
          },
          async create(title){
            const response = await fetch(apiUrl + '/tasks', {
              method: 'POST',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify({ title: title }),
            });
            return handleResponse(response);
          },
          async update(id, changes){
            const response = await fetch(apiUrl + '/tasks/' + encodeURIComponent(id), {
              method: 'PUT',
              headers: { 'Content-Type': 'application/json' },
              body: JSON.stringify(changes),
            });
            return handleResponse(response);
          },
          async remove(id){
            const response = await fetch(apiUrl + '/tasks/' + encodeURIComponent(id), { method: 'DELETE' });
            if (!response.ok) throw new Error('Failed to delete task');
          },
        };

        function visibleTasks(){
          return state.tasks.filter(function(task){
            if (state.filter === 'active') return !task.completed;
            if (state.filter === 'completed') return task.completed;
            return true;
          });
        }

        function button(label, onClick, extraClass){
          const node = document.createElement('button');
          node.type = 'button';
          node.textContent = label;
          if (extraClass) node.className = extraClass;
          node.addEventListener('click', onClick);
          return node;
        }

        function renderRow(task){
          const item = document.createElement('li');
          item.dataset.taskId = task.id;
          if (task.completed) item.classList.add('completed');
          if (state.deletingId === task.id) item.classList.add('deleting');
          if (state.editingId === task.id) {
            const input = document.createElement('input');
            input.type = 'text';
            input.value = state.editingTitle;
            input.addEventListener('input', function(){ state.editingTitle = input.value; });
            item.appendChild(input);
            item.appendChild(button('Save', function(){ saveEdit(task); }));
            item.appendChild(button('Cancel', cancelEdit, 'danger'));
            return item;
          }
          const title = document.createElement('span');
          title.className = 'title';
          title.textContent = task.title;
          title.addEventListener('click', function(){ toggle(task); });
          item.appendChild(title);
          const actions = document.createElement('div');
          actions.appendChild(button('Edit', function(){ startEdit(task); }));
          actions.appendChild(button('Delete', function(){ remove(task.id); }, 'danger'));
          item.appendChild(actions);
          return item;
        }

        function render(){
          const remaining = state.tasks.filter(function(task){ return !task.completed; }).length;
          summary.textContent = remaining + ' task' + (remaining !== 1 ? 's' : '') + ' remaining';
          filterBar.querySelectorAll('button').forEach(function(node){
            node.setAttribute('aria-pressed', node.dataset.filter === state.filter ? 'true' : 'false');
          });
          listContainer.innerHTML = '';
          if (state.loading) {
            const loading = document.createElement('p');
            loading.className = 'empty';
            loading.textContent = 'Loading tasks...';
            listContainer.appendChild(loading);
            return;
          }
          const tasks = visibleTasks();
          if (!tasks.length) {
            const empty = document.createElement('p');
            empty.className = 'empty';
            empty.textContent = 'No tasks to show.';
            listContainer.appendChild(empty);
            return;
          }
          const list = document.createElement('ul');
          list.className = 'tasks';
          tasks.forEach(function(task){ list.appendChild(renderRow(task)); });
          listContainer.appendChild(list);
        }

        async function fetchTasks(){
          state.loading = true;
          render();
          try {
            state.tasks = await api.list();
          } catch (error) {
            window.alert('Failed to fetch tasks: ' + error.message);
          } finally {
            state.loading = false;
            render();
          }
        }

        async function add(){
          const title = newTitleInput.value;
          if (!title.trim()) return;
          try {
            await api.create(title);
          } catch (error) {
            window.alert('Failed to add task: ' + error.message);
            return;
          }
          newTitleInput.value = '';
          await fetchTasks();
        }

        async function toggle(task){
          try {
            await api.update(task.id, { completed: !task.completed });
          } catch (error) {
            window.alert('Failed to update task: ' + error.message);
            return;
          }
          await fetchTasks();
        }

        function startEdit(task){
          state.editingId = task.id;
          state.editingTitle = task.title;
          render();
        }

        function cancelEdit(){
          state.editingId = null;
          state.editingTitle = '';
          render();
        }

        async function saveEdit(task){
          try {
            await api.update(task.id, { title: state.editingTitle });
          } catch (error) {
            window.alert('Failed to update task: ' + error.message);
            return;
          }
          state.editingId = null;
          state.editingTitle = '';
          await fetchTasks();
        }

        function remove(id){
          state.deletingId = id;
          render();
          window.setTimeout(async function(){
            try {
              await api.remove(id);
              await fetchTasks();
            } catch (error) {
              window.alert('Failed to delete task: ' + error.message);
            } finally {
              state.deletingId = null;
              render();
            }
          }, deleteDelay);
        }

        addForm.addEventListener('submit', function(event){
          event.preventDefault();
          add();
        });
        filterBar.addEventListener('click', function(event){
          const target = event.target.closest('button[data-filter]');
          if (!target) return;
          state.filter = target.dataset.filter;
          render();
        });

        fetchTasks();
      })();
    </script>
    """
