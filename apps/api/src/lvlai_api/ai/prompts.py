"""
Prompt templates for the organizer agent
"""

from lvlai_api.ai.models import TaskContext
from lvlai_api.ai.task_utils import to_calendar_date

# Workload balance hints given to the model. They steer the suggestions but
# nothing in the backend enforces them.
OVERLOADED_DAY_TASKS = 5
LIGHT_DAY_TASKS = (1, 2)

ORGANIZER_SYSTEM_PROMPT = """You are an intelligent task organization assistant for LVL.AI, a gamified task management platform.

You have access to the user's complete profile and task data. Use this information to provide personalized, actionable advice on task organization, prioritization, and productivity.

CAPABILITIES:
- Analyze task lists and identify patterns
- Suggest task prioritization strategies
- Recommend task breakdown for complex items
- Identify overdue tasks and suggest recovery plans
- Provide time management insights
- Suggest task groupings by tags/categories
- Motivate users based on their progress

GUIDELINES:
- Be specific and reference actual tasks when relevant
- Consider the user's level, XP, and goals
- Acknowledge overdue tasks with empathy
- Suggest realistic, achievable action plans
- Use the gamification elements (XP, levels) for motivation
- Keep responses concise but informative

CONTEXT:
{context}"""

SUGGESTIONS_PROMPT = """Analyze my current tasks and provide specific suggestions on how I should organize and prioritize them. Consider:
1. What tasks should I focus on today?
2. Are there any overdue tasks that need immediate attention?
3. How should I group or sequence my tasks?
4. Any tasks that could be broken down into smaller steps?"""

DAILY_PLAN_PROMPT = (
    "Create a daily task plan for me. Based on my current tasks, XP goals, and "
    "priorities, suggest which tasks I should focus on today and in what order."
)

PRODUCTIVITY_PROMPT = (
    "Analyze my task completion patterns and productivity. What insights can you "
    "provide about my task management habits? What areas could I improve?"
)

MOTIVATION_PROMPT = (
    "Based on my current progress and tasks, give me some motivation and "
    "encouragement to stay productive!"
)

BREAKDOWN_PROMPT = """Break down the following task into smaller, actionable subtasks. Make each subtask specific, measurable, and achievable:

Task: "{task_description}"

Provide:
1. A list of 3-7 subtasks that logically break down the main task
2. A suggested order for completing these subtasks
3. Estimated effort/complexity for each subtask (low/medium/high)
4. Any dependencies between subtasks

Format the response as a clear, numbered list that I can use to create individual tasks."""

OPTIMIZATION_PROMPT = """Analyze these {task_count} tasks and redistribute them to balance workload over the next {days} days.

TASKS:
{task_list}

You MUST respond with ONLY this JSON format (no other text):
{{
  "recommendations": [
    {{
      "taskId": "exact_id_from_list",
      "taskTitle": "exact title",
      "currentDueDate": "YYYY-MM-DD or null",
      "suggestedDueDate": "YYYY-MM-DD",
      "currentPriority": "low/medium/high/urgent",
      "suggestedPriority": "low/medium/high/urgent",
      "reason": "reason"
    }}
  ]
}}

CRITICAL RULES:
- Find tasks on overloaded days ({overloaded}+ tasks) and move some to lighter days ({light_min}-{light_max} tasks)
- Schedule tasks with "No due date" to balance workload
- Prioritize overdue tasks (negative days)
- Suggested dates must be YYYY-MM-DD format within next {days} days
- Include at least 5-10 recommendations if there are imbalances
- Return ONLY the JSON, no markdown, no code blocks, no explanations"""


def build_system_prompt(formatted_context: str) -> str:
    return ORGANIZER_SYSTEM_PROMPT.format(context=formatted_context)


def build_breakdown_prompt(task_description: str) -> str:
    return BREAKDOWN_PROMPT.format(task_description=task_description)


def format_optimization_task(task: TaskContext, index: int) -> str:
    due = to_calendar_date(task.due_date)
    due_str = due.isoformat() if due else "No due date"
    return (
        f'{index}. [ID: {task.id}] "{task.title}" - '
        f"Priority: {task.priority.value}, Due: {due_str}"
    )


def build_optimization_prompt(candidates: list[TaskContext], days: int) -> str:
    """Prompt asking the model for a JSON list of rescheduling recommendations"""
    task_list = "\n".join(
        format_optimization_task(task, i) for i, task in enumerate(candidates, 1)
    )
    return OPTIMIZATION_PROMPT.format(
        task_count=len(candidates),
        days=days,
        task_list=task_list,
        overloaded=OVERLOADED_DAY_TASKS,
        light_min=LIGHT_DAY_TASKS[0],
        light_max=LIGHT_DAY_TASKS[1],
    )
