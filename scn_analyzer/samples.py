"""Small demo project used when no input files are given."""

from __future__ import annotations

import json

from scn_analyzer.models import FileContent

DEFAULT_FILES: tuple[FileContent, ...] = (
    FileContent(
        path="src/main.tsx",
        content="""import React from 'react';
import { Page } from './components/Page';
import { UserProfile } from './components/UserProfile';
import { getUser } from './api/client';
import './styles/main.css';

export async function main() {
    const user = await getUser('1');
    const App = () => (
        <Page>
            <UserProfile initialUser={user} />
        </Page>
    );
    return App;
}
""",
    ),
    FileContent(
        path="src/api/client.ts",
        content="""import type { User } from '../types';
import { capitalize } from '../utils/string';

const API_BASE = '/api';

export async function getUser(id: string): Promise<User> {
    const response = await fetch(`${API_BASE}/users/${id}`);
    const user = (await response.json()) as User;
    return { ...user, name: capitalize(user.name) };
}
""",
    ),
    FileContent(
        path="src/types.ts",
        content="""export interface User {
    id: string;
    name: string;
    email?: string;
}

export type UserId = string;

export enum Role {
    Admin,
    Member,
}
""",
    ),
    FileContent(
        path="src/utils/string.ts",
        content="""export function capitalize(value: string): string {
    return value.charAt(0).toUpperCase() + value.slice(1);
}

export class Formatter {
    private readonly prefix: string;

    constructor(prefix: string) {
        this.prefix = prefix;
    }

    static create(): Formatter {
        return new Formatter('>');
    }

    format(value: string): string {
        return `${this.prefix} ${value}`;
    }
}
""",
    ),
    FileContent(
        path="src/components/Page.tsx",
        content="""import React from 'react';

export const Page = ({ children }: { children: React.ReactNode }) => {
    return <main className="page">{children}</main>;
};
""",
    ),
    FileContent(
        path="src/components/UserProfile.tsx",
        content="""import React from 'react';
import styled from 'styled-components';
import type { User } from '../types';

const Card = styled.div`
    padding: 1rem;
`;

export function UserProfile({ initialUser }: { initialUser: User }) {
    return <Card><h2>{initialUser.name}</h2></Card>;
}
""",
    ),
    FileContent(
        path="src/styles/main.css",
        content=""":root {
  --primary-color: #3366ff;
}

@media (max-width: 600px) {
  .page { padding: 0; }
}

body, .page {
  margin: 0;
}

#root {
  display: flex;
}
""",
    ),
)


def default_files_json() -> str:
    """The demo project as the JSON text accepted by the analyzer."""
    return json.dumps([f.model_dump() for f in DEFAULT_FILES], indent=2)
