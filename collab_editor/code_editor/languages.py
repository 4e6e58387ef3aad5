from fastapi import APIRouter
from pydantic import BaseModel
from typing import List

DEFAULT_LANGUAGE = "javascript"
DEFAULT_CODE = "// start code here"


class Language(BaseModel):
    id: str
    label: str
    boilerplate: str


class LanguageCatalog(BaseModel):
    default_language: str
    default_code: str
    languages: List[Language]


LANGUAGES = [
    Language(
        id="javascript",
        label="JavaScript",
        boilerplate="""// JavaScript Boilerplate
function main() {
  console.log("Hello from JavaScript!");
}
main();""",
    ),
    Language(
        id="cpp",
        label="C++",
        boilerplate="""// C++ Boilerplate
#include <iostream>
using namespace std;

int main() {
    cout << "Hello from C++!" << endl;
    return 0;
}
""",
    ),
    Language(
        id="python",
        label="Python",
        boilerplate="""# Python Boilerplate
def main():
    print("Hello from Python!")

if __name__ == "__main__":
    main()
""",
    ),
    Language(
        id="java",
        label="Java",
        boilerplate="""// Java Boilerplate
public class Main {
    public static void main(String[] args) {
        System.out.println("Hello from Java!");
    }
}
""",
    ),
]

router = APIRouter()


@router.get("/languages", response_model=LanguageCatalog)
async def list_languages():
    return LanguageCatalog(
        default_language=DEFAULT_LANGUAGE,
        default_code=DEFAULT_CODE,
        languages=LANGUAGES,
    )
