"""
内置种子数据

- 本地模式在存储缺失或损坏时回退到 SEED_COURSES
- scripts/init_course_data.py 用同一份数据初始化数据库
"""
import copy
from typing import Dict, List

DEMO_PASSWORD = "password"

DEMO_USERS: List[Dict] = [
    {"name": "Demo Student", "email": "student@example.com", "role": "student"},
    {"name": "Demo Instructor", "email": "instructor@example.com", "role": "instructor"},
]

SEED_COURSES: List[Dict] = [
    {
        "id": "c-js-101",
        "slug": "javascript-fundamentals",
        "title": "JavaScript Fundamentals",
        "description": "Start coding with JS: variables, functions, arrays, and DOM.",
        "category": "Programming",
        "level": "beginner",
        "duration_mins": 180,
        "lessons": [
            {
                "id": "l-js-1",
                "title": "Intro & Setup",
                "content": (
                    "JavaScript runs in the browser and on servers (Node.js). Install a code editor "
                    "(VS Code) and open DevTools. Try `console.log('Hello')`."
                ),
                "resources": [
                    {
                        "label": "MDN - JS Guide",
                        "url": "https://developer.mozilla.org/en-US/docs/Web/JavaScript/Guide",
                    },
                ],
                "order": 1,
            },
            {
                "id": "l-js-2",
                "title": "Variables & Types",
                "content": (
                    "Use `let`/`const` for block-scoped variables. Primitives: string, number, "
                    "boolean, null, undefined, symbol, bigint."
                ),
                "resources": [],
                "order": 2,
            },
            {
                "id": "l-js-3",
                "title": "Functions & Arrays",
                "content": (
                    "Functions encapsulate logic. Arrays store ordered data. "
                    "Practice mapping and filtering arrays."
                ),
                "resources": [],
                "order": 3,
            },
        ],
        "quiz": {
            "id": "q-js-1",
            "title": "JS Basics Quiz",
            "questions": [
                {
                    "id": "q1",
                    "prompt": "Which keyword creates a block-scoped variable?",
                    "choices": ["var", "let", "function", "scope"],
                    "answer_index": 1,
                },
                {
                    "id": "q2",
                    "prompt": "What method creates a new array with items that pass a test?",
                    "choices": ["forEach", "map", "reduce", "filter"],
                    "answer_index": 3,
                },
            ],
        },
    },
    {
        "id": "c-ui-201",
        "slug": "ui-ux-essentials",
        "title": "UI/UX Design Essentials",
        "description": "Design interfaces that feel good: hierarchy, contrast, spacing.",
        "category": "Design",
        "level": "intermediate",
        "duration_mins": 120,
        "lessons": [
            {
                "id": "l-ui-1",
                "title": "Design Principles",
                "content": (
                    "Hierarchy, contrast, alignment, repetition. Keep spacing generous; "
                    "balance typography with scale & weight."
                ),
                "resources": [],
                "order": 1,
            },
            {
                "id": "l-ui-2",
                "title": "Wireframing",
                "content": "Use low-fidelity wireframes to validate ideas fast before hi-fi mockups.",
                "resources": [],
                "order": 2,
            },
        ],
        "quiz": {
            "id": "q-ui-1",
            "title": "UI Essentials Quiz",
            "questions": [
                {
                    "id": "u1",
                    "prompt": "Which is NOT a core design principle?",
                    "choices": ["Hierarchy", "Repetition", "Confusion", "Contrast"],
                    "answer_index": 2,
                },
            ],
        },
    },
]


def seed_courses() -> List[Dict]:
    """返回种子课程的深拷贝，调用方可以随意修改"""
    return copy.deepcopy(SEED_COURSES)
